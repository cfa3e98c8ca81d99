# tests/test_contract.py

import pytest
from eth_utils import to_checksum_address

from watcher.contracts.contract import Contract
from watcher.types import Event, FilterGenerationError, Method

from tests.fakes import ERC20_ABI, TOKEN_ADDRESS, TRANSFER_TOPIC, ALICE, BOB


def abi_entry(name):
    return next(e for e in ERC20_ABI if e['name'] == name)


def make_contract(events=('Transfer',), methods=(), **kwargs):
    return Contract(
        address=TOKEN_ADDRESS,
        starting_block=100,
        events={name: Event.from_abi(abi_entry(name)) for name in events},
        methods={name: Method.from_abi(abi_entry(name)) for name in methods},
        **kwargs,
    ).init()


class TestEventSignatures:
    def test_transfer_topic0(self):
        event = Event.from_abi(abi_entry('Transfer'))

        assert event.sig() == 'Transfer(address,address,uint256)'
        assert event.topic0() == TRANSFER_TOPIC

    def test_tuple_fields_use_canonical_types(self):
        event = Event.from_abi({
            'type': 'event', 'name': 'Swap',
            'inputs': [
                {'name': 'order', 'type': 'tuple', 'components': [
                    {'name': 'maker', 'type': 'address'},
                    {'name': 'amount', 'type': 'uint256'},
                ]},
                {'name': 'ids', 'type': 'uint256[]'},
            ],
        })

        assert event.sig() == 'Swap((address,uint256),uint256[])'


class TestGenerateFilters:
    def test_one_filter_per_event(self):
        contract = make_contract(events=('Transfer', 'Approval'))

        contract.generate_filters()

        assert set(contract.filters) == {'Transfer', 'Approval'}
        transfer = contract.filters['Transfer']
        assert transfer.name == f"Transfer_{TOKEN_ADDRESS}"
        assert transfer.from_block == 100
        assert transfer.to_block == -1
        assert transfer.address == to_checksum_address(TOKEN_ADDRESS)
        assert transfer.topic(0) == TRANSFER_TOPIC
        assert transfer.topic(1) is None

    def test_no_events_is_an_error(self):
        contract = make_contract(events=())

        with pytest.raises(FilterGenerationError):
            contract.generate_filters()


class TestArgumentFilters:
    def test_init_lowercases_arguments(self):
        contract = make_contract(filter_args={ALICE.upper().replace('0X', '0x')})

        assert contract.filter_args == {ALICE}

    def test_event_filter_matches_any_value(self):
        contract = make_contract(filter_args={BOB})

        assert contract.passes_event_filter({'from': ALICE, 'to': to_checksum_address(BOB), 'value': '1'})
        assert not contract.passes_event_filter({'from': ALICE, 'to': ALICE, 'value': '1'})

    def test_empty_event_filter_passes_everything(self):
        assert make_contract().passes_event_filter({'from': ALICE})

    def test_method_filter(self):
        contract = make_contract(method_args={ALICE})

        assert contract.passes_method_filter(to_checksum_address(ALICE))
        assert not contract.passes_method_filter(BOB)


class TestEmittedValues:
    def test_caches_exist_only_for_polled_input_kinds(self):
        assert make_contract().emitted_addrs is None
        assert make_contract(methods=('totalSupply',)).emitted_addrs is None
        assert make_contract(methods=('balanceOf',)).emitted_addrs == set()

    def test_addresses_are_stored_checksummed(self):
        contract = make_contract(methods=('balanceOf',))

        contract.add_emitted_addr(ALICE, ALICE.upper().replace('0X', '0x'))

        assert contract.emitted_addrs == {to_checksum_address(ALICE)}

    def test_method_args_restrict_emitted_values(self):
        contract = make_contract(methods=('balanceOf',), method_args={BOB})

        contract.add_emitted_addr(ALICE, BOB)

        assert contract.emitted_addrs == {to_checksum_address(BOB)}

    def test_adding_without_a_cache_is_a_no_op(self):
        contract = make_contract()

        contract.add_emitted_addr(ALICE)
        contract.add_emitted_hash('0x' + 'ab' * 32)

        assert contract.emitted_addrs is None
        assert contract.emitted_hashes is None
