# watcher/transform/poller.py

from itertools import product
from typing import Any, List, Optional

from ..clients.interfaces import BlockChainInterface
from ..contracts.contract import Contract
from ..core.logging import LoggingMixin
from ..database.interfaces import MethodRepositoryInterface
from ..database.repositories.method_repository import MethodRepository
from ..types import Field, Method, MethodResult, ContractDataResult, PollingError
from .interfaces import PollerInterface


class Poller(LoggingMixin, PollerInterface):
    """
    Calls a contract's selected constant methods at every block of its watch range.

    Methods without inputs are called once per block. Methods taking an
    address or bytes32 input are called with every value of that kind the
    converter has seen in the contract's logs.
    """

    def __init__(self, blockchain: BlockChainInterface, db_manager=None,
                 method_repository: Optional[MethodRepositoryInterface] = None):
        self.blockchain = blockchain
        self.method_repository = method_repository or MethodRepository(db_manager)

    def poll_contract(self, contract: Contract, last_block: int) -> None:
        if not contract.methods:
            return

        self.log_debug("Polling contract methods",
                       contract_address=contract.address,
                       block_number=contract.starting_block,
                       last_block=last_block)

        for block in range(contract.starting_block, last_block + 1):
            self.poll_contract_at(contract, block)

    def poll_contract_at(self, contract: Contract, block: int) -> None:
        for method in contract.methods.values():
            if len(method.args) > 2:
                raise PollingError(f"method {method.name} takes too many input arguments")

            results = [
                self._call(contract, method, list(inputs), block)
                for inputs in self._input_sets(contract, method)
            ]
            self.method_repository.persist_results(results)

    def _input_sets(self, contract: Contract, method: Method) -> List[tuple]:
        if not method.args:
            return [()]
        pools = [sorted(self._emitted_values(contract, arg)) for arg in method.args]
        return list(product(*pools))

    @staticmethod
    def _emitted_values(contract: Contract, arg: Field) -> set:
        if arg.type == 'address':
            return contract.emitted_addrs or set()
        if arg.type == 'bytes32':
            return contract.emitted_hashes or set()
        raise PollingError(f"cannot poll input of type {arg.type}")

    def _call(self, contract: Contract, method: Method, inputs: List[str], block: int) -> MethodResult:
        try:
            output = self.blockchain.fetch_contract_data(
                contract.abi, contract.address, method.name, self._call_args(method, inputs), block
            )
        except Exception as e:
            raise PollingError(
                f"error calling {method.name} on {contract.address} at block {block}: {e}"
            ) from e

        rendered = self._render(output)

        if contract.piping:
            self._pipe(contract, method, rendered)

        return MethodResult(
            method=method.name,
            inputs=inputs,
            output=rendered,
            block=block,
            address=contract.address,
            contract_name=contract.name,
        )

    @staticmethod
    def _call_args(method: Method, inputs: List[str]) -> List[Any]:
        return [bytes.fromhex(value[2:]) if arg.type == 'bytes32' else value
                for arg, value in zip(method.args, inputs)]

    @staticmethod
    def _render(output: Any) -> str:
        if isinstance(output, bool):
            return 'true' if output else 'false'
        if isinstance(output, (bytes, bytearray)):
            return '0x' + bytes(output).hex()
        return str(output)

    @staticmethod
    def _pipe(contract: Contract, method: Method, rendered: str) -> None:
        """Feed address and bytes32 outputs back in as inputs for other methods"""
        output_type = method.returns[0].type if method.returns else ''
        if output_type == 'address':
            contract.add_emitted_addr(rendered)
        elif output_type == 'bytes32':
            contract.add_emitted_hash(rendered)

    def fetch_contract_data(self, abi: str, address: str, method: str,
                            method_args: Optional[List[Any]], block_number: int) -> ContractDataResult:
        try:
            value = self.blockchain.fetch_contract_data(abi, address, method, method_args, block_number)
        except Exception as e:
            return ContractDataResult.failure(e)
        return ContractDataResult.success(value)
