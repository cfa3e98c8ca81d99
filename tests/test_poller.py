# tests/test_poller.py

import pytest
from eth_utils import to_checksum_address

from watcher.contracts.contract import Contract
from watcher.transform.poller import Poller
from watcher.types import Method, PollingError

from tests.fakes import (
    ALICE,
    BOB,
    ERC20_ABI,
    ERC20_ABI_STR,
    TOKEN_ADDRESS,
    FakeBlockChain,
    FakeMethodRepository,
)


def method(name):
    return Method.from_abi(next(e for e in ERC20_ABI if e['name'] == name))


def make_contract(*names, starting_block=10, **kwargs):
    return Contract(
        address=TOKEN_ADDRESS,
        name='Dai Stablecoin',
        abi=ERC20_ABI_STR,
        starting_block=starting_block,
        methods={n: method(n) for n in names},
        **kwargs,
    ).init()


@pytest.fixture
def repository():
    return FakeMethodRepository()


class TestPollContract:
    def test_no_methods_makes_no_calls(self, repository):
        chain = FakeBlockChain()
        Poller(chain, method_repository=repository).poll_contract(make_contract(), 20)

        assert chain.calls == []
        assert repository.results == []

    def test_no_arg_method_called_every_block(self, repository):
        chain = FakeBlockChain(answers={('totalSupply',): 5000})
        poller = Poller(chain, method_repository=repository)

        poller.poll_contract(make_contract('totalSupply'), 12)

        assert [call[3] for call in chain.calls] == [10, 11, 12]
        assert [r.block for r in repository.results] == [10, 11, 12]
        assert repository.results[0].output == '5000'
        assert repository.results[0].contract_name == 'Dai Stablecoin'
        assert repository.results[0].inputs == []

    def test_cursor_before_start_polls_nothing(self, repository):
        chain = FakeBlockChain(answers={('totalSupply',): 1})

        Poller(chain, method_repository=repository).poll_contract(make_contract('totalSupply'), 9)

        assert chain.calls == []

    def test_address_method_uses_emitted_addresses(self, repository):
        alice, bob = to_checksum_address(ALICE), to_checksum_address(BOB)
        chain = FakeBlockChain(answers={('balanceOf', alice): 1, ('balanceOf', bob): 2})
        contract = make_contract('balanceOf')
        contract.add_emitted_addr(ALICE, BOB)

        Poller(chain, method_repository=repository).poll_contract_at(contract, 10)

        assert sorted((r.inputs[0], r.output) for r in repository.results) == sorted([(alice, '1'), (bob, '2')])

    def test_two_address_method_uses_every_pair(self, repository):
        alice, bob = to_checksum_address(ALICE), to_checksum_address(BOB)
        answers = {('allowance', a, b): 0 for a in (alice, bob) for b in (alice, bob)}
        chain = FakeBlockChain(answers=answers)
        contract = make_contract('allowance')
        contract.add_emitted_addr(ALICE, BOB)

        Poller(chain, method_repository=repository).poll_contract_at(contract, 10)

        assert len(repository.results) == 4

    def test_call_failure_is_a_polling_error(self, repository):
        chain = FakeBlockChain(fail_methods={'totalSupply'})

        with pytest.raises(PollingError, match='totalSupply'):
            Poller(chain, method_repository=repository).poll_contract(make_contract('totalSupply'), 10)

    def test_too_many_arguments(self, repository):
        contract = make_contract()
        contract.methods['wide'] = Method.from_abi({
            'type': 'function', 'name': 'wide', 'stateMutability': 'view',
            'inputs': [{'name': n, 'type': 'address'} for n in 'abc'],
            'outputs': [{'name': '', 'type': 'uint256'}],
        })

        with pytest.raises(PollingError):
            Poller(FakeBlockChain(), method_repository=repository).poll_contract_at(contract, 10)


class TestPiping:
    def test_address_outputs_feed_emitted_addresses(self, repository):
        owner = {
            'type': 'function', 'name': 'owner', 'stateMutability': 'view',
            'inputs': [], 'outputs': [{'name': '', 'type': 'address'}],
        }
        contract = make_contract('balanceOf', piping=True)
        contract.methods['owner'] = Method.from_abi(owner)
        chain = FakeBlockChain(answers={('owner',): ALICE, ('balanceOf', to_checksum_address(ALICE)): 7})

        poller = Poller(chain, method_repository=repository)
        poller.poll_contract_at(contract, 10)
        poller.poll_contract_at(contract, 11)

        assert contract.emitted_addrs == {to_checksum_address(ALICE)}
        assert ('balanceOf', '7') in {(r.method, r.output) for r in repository.results}

    def test_piping_off_leaves_cache_alone(self, repository):
        contract = make_contract('balanceOf')
        contract.methods['owner'] = Method.from_abi({
            'type': 'function', 'name': 'owner', 'stateMutability': 'view',
            'inputs': [], 'outputs': [{'name': '', 'type': 'address'}],
        })
        chain = FakeBlockChain(answers={('owner',): ALICE})

        Poller(chain, method_repository=repository).poll_contract_at(contract, 10)

        assert contract.emitted_addrs == set()


class TestFetchContractData:
    def test_success(self):
        chain = FakeBlockChain(answers={('name',): 'Dai Stablecoin'})

        result = Poller(chain, method_repository=FakeMethodRepository()).fetch_contract_data(
            ERC20_ABI_STR, TOKEN_ADDRESS, 'name', None, 0
        )

        assert result.ok
        assert result.value == 'Dai Stablecoin'
        assert chain.calls == [(TOKEN_ADDRESS, 'name', (), 0)]

    def test_failure_is_returned_not_raised(self):
        chain = FakeBlockChain(fail_methods={'name'})

        result = Poller(chain, method_repository=FakeMethodRepository()).fetch_contract_data(
            ERC20_ABI_STR, TOKEN_ADDRESS, 'name', None, 0
        )

        assert not result.ok
        assert 'execution reverted' in result.error
