# tests/test_parser.py

import json
import logging

import httpx
import pytest

from watcher.contracts.abi_loader import ABILoader
from watcher.contracts.parser import Parser
from watcher.types import AbiResolutionError

from tests.fakes import ERC20_ABI, ERC20_ABI_STR, TOKEN_ADDRESS


def etherscan_client(body, status_code=200, requests=None):
    def handler(request):
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, json=body)
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def parser():
    p = Parser()
    p.parse_abi_str(ERC20_ABI_STR)
    return p


class TestParseAbiStr:
    def test_parsed_abi_and_raw_abi(self, parser):
        assert parser.parsed_abi() == ERC20_ABI
        assert json.loads(parser.abi()) == ERC20_ABI

    def test_invalid_json(self):
        with pytest.raises(AbiResolutionError):
            Parser().parse_abi_str('{not json')

    def test_non_list_abi(self):
        with pytest.raises(AbiResolutionError):
            Parser().parse_abi_str('{"abi": []}')


class TestSelection:
    def test_all_events_when_none_wanted(self, parser):
        assert set(parser.get_events(None)) == {'Transfer', 'Approval'}
        assert set(parser.get_events([])) == {'Transfer', 'Approval'}

    def test_selected_events(self, parser):
        assert set(parser.get_events(['Transfer', 'Missing'])) == {'Transfer'}

    def test_overloaded_event_names_are_reported(self, caplog):
        parser = Parser()
        parser.parse_abi_str(json.dumps([
            {"type": "event", "name": "Deposit", "inputs": [{"name": "amount", "type": "uint256", "indexed": False}]},
            {"type": "event", "name": "Deposit", "inputs": [
                {"name": "owner", "type": "address", "indexed": True},
                {"name": "amount", "type": "uint256", "indexed": False},
            ]},
        ]))

        with caplog.at_level(logging.WARNING, logger="watcher"):
            events = parser.get_events(None)

        assert events["Deposit"].sig() == "Deposit(address,uint256)"
        assert "Deposit(address,uint256)" in caplog.text

    def test_no_methods_when_none_wanted(self, parser):
        assert parser.get_select_methods(None) == {}
        assert parser.get_select_methods([]) == {}

    def test_only_pollable_methods_are_selected(self, parser):
        methods = parser.get_select_methods(['name', 'balanceOf', 'allowance', 'transfer'])

        # transfer is not constant
        assert set(methods) == {'name', 'balanceOf', 'allowance'}
        assert [a.type for a in methods['allowance'].args] == ['address', 'address']

    def test_methods_with_unpollable_inputs_are_skipped(self):
        parser = Parser()
        parser.parse_abi_str(json.dumps([{
            'type': 'function', 'name': 'balanceOfAt', 'stateMutability': 'view',
            'inputs': [{'name': 'owner', 'type': 'address'}, {'name': 'block', 'type': 'uint256'}],
            'outputs': [{'name': '', 'type': 'uint256'}],
        }]))

        assert parser.get_select_methods(['balanceOfAt']) == {}

    def test_legacy_constant_flag(self):
        parser = Parser()
        parser.parse_abi_str(json.dumps([{
            'type': 'function', 'name': 'owner', 'constant': True,
            'inputs': [], 'outputs': [{'name': '', 'type': 'address'}],
        }]))

        assert set(parser.get_select_methods(['owner'])) == {'owner'}


class TestParse:
    def test_local_abi_file_is_preferred(self, tmp_path):
        (tmp_path / f"{TOKEN_ADDRESS}.json").write_text(json.dumps({'abi': ERC20_ABI}))
        requests = []
        parser = Parser(abi_loader=ABILoader(tmp_path), http_client=etherscan_client({}, requests=requests))

        parser.parse(TOKEN_ADDRESS.upper().replace('0X', '0x'))

        assert parser.parsed_abi() == ERC20_ABI
        assert requests == []

    def test_etherscan_lookup(self, tmp_path):
        requests = []
        client = etherscan_client({'status': '1', 'message': 'OK', 'result': ERC20_ABI_STR}, requests=requests)
        parser = Parser(network='goerli', abi_loader=ABILoader(tmp_path), api_key='secret', http_client=client)

        parser.parse(TOKEN_ADDRESS)

        assert parser.parsed_abi() == ERC20_ABI
        request = requests[0]
        assert request.url.host == 'api-goerli.etherscan.io'
        assert request.url.params['address'] == TOKEN_ADDRESS
        assert request.url.params['apikey'] == 'secret'

    def test_etherscan_error_status(self):
        client = etherscan_client({'status': '0', 'message': 'NOTOK', 'result': 'Contract source code not verified'})

        with pytest.raises(AbiResolutionError, match='not verified'):
            Parser(http_client=client).parse(TOKEN_ADDRESS)

    def test_http_error(self):
        client = etherscan_client({}, status_code=502)

        with pytest.raises(AbiResolutionError):
            Parser(http_client=client).parse(TOKEN_ADDRESS)

    def test_unknown_network_fails_at_lookup(self):
        parser = Parser(network='moonbase', http_client=etherscan_client({}))

        with pytest.raises(AbiResolutionError, match='unknown network'):
            parser.parse(TOKEN_ADDRESS)


class TestABILoader:
    def test_missing_file_is_cached_as_none(self, tmp_path):
        loader = ABILoader(tmp_path)

        assert loader.load_abi(TOKEN_ADDRESS) is None
        (tmp_path / f"{TOKEN_ADDRESS}.json").write_text(json.dumps(ERC20_ABI))
        assert loader.load_abi(TOKEN_ADDRESS) is None

        loader.clear_cache()
        assert loader.load_abi(TOKEN_ADDRESS) == ERC20_ABI

    def test_invalid_file(self, tmp_path):
        (tmp_path / f"{TOKEN_ADDRESS}.json").write_text('"not an abi"')

        assert ABILoader(tmp_path).load_abi(TOKEN_ADDRESS) is None


class TestHttpClientLifetime:
    def test_injected_client_stays_open(self):
        client = etherscan_client({'status': '1', 'message': 'OK', 'result': ERC20_ABI_STR})

        Parser(http_client=client).parse(TOKEN_ADDRESS)

        assert not client.is_closed

    def test_own_client_is_closed_after_lookup(self, monkeypatch):
        created = []
        make_client = httpx.Client

        def client_factory(**kwargs):
            client = make_client(transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={'status': '1', 'message': 'OK', 'result': ERC20_ABI_STR})
            ), **kwargs)
            created.append(client)
            return client

        monkeypatch.setattr(httpx, 'Client', client_factory)
        parser = Parser(timeout=5.0)

        parser.parse(TOKEN_ADDRESS)

        assert parser.parsed_abi() == ERC20_ABI
        assert len(created) == 1
        assert created[0].is_closed
