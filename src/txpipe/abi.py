"""
ABI codec - encode function calls and decode their results.

ABIs come from a JSON file: either a bare ABI list or a compiler
artifact (Foundry / Hardhat) with an ``abi`` key.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from eth_abi import decode, encode
from eth_utils import keccak

from .errors import AbiError


def load_abi(path: Union[str, Path]) -> list[dict[str, Any]]:
    """
    Load an ABI from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        AbiError: If the file holds neither an ABI list nor an artifact
    """
    abi_path = Path(path)
    if not abi_path.exists():
        raise FileNotFoundError(f"ABI not found: {abi_path}")

    with abi_path.open("r", encoding="utf-8") as f:
        artifact = json.load(f)

    if isinstance(artifact, list):
        return artifact
    if isinstance(artifact, dict) and isinstance(artifact.get("abi"), list):
        return artifact["abi"]
    raise AbiError(f"No ABI in {abi_path}")


def _canonical_type(param: dict[str, Any]) -> str:
    """Solidity type string, expanding tuples into ``(t1,t2)[]`` form."""
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({inner}){typ[len('tuple'):]}"
    return typ


class AbiCodec:
    """
    Pack calls and unpack results for the functions of one contract ABI.

    Overloaded functions resolve to the first entry with a matching name and
    argument count.
    """

    def __init__(self, abi: list[dict[str, Any]]) -> None:
        self.abi = abi

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AbiCodec":
        return cls(load_abi(path))

    def _function(self, name: str, arg_count: int | None = None) -> dict[str, Any]:
        candidates = [
            entry for entry in self.abi
            if entry.get("type", "function") == "function" and entry.get("name") == name
        ]
        if not candidates:
            raise AbiError(f"Function {name} not found in ABI")
        if arg_count is None:
            return candidates[0]
        for entry in candidates:
            if len(entry.get("inputs", [])) == arg_count:
                return entry
        raise AbiError(f"No overload of {name} takes {arg_count} argument(s)")

    def signature(self, name: str, arg_count: int | None = None) -> str:
        func = self._function(name, arg_count)
        types = ",".join(_canonical_type(p) for p in func.get("inputs", []))
        return f"{name}({types})"

    def selector(self, name: str, arg_count: int | None = None) -> bytes:
        # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
        return keccak(text=self.signature(name, arg_count))[:4]

    def pack(self, name: str, *args: Any) -> bytes:
        """ABI-encode a call: 4-byte selector followed by encoded arguments."""
        func = self._function(name, len(args))
        input_types = [_canonical_type(p) for p in func.get("inputs", [])]
        try:
            encoded_args = encode(input_types, list(args)) if input_types else b""
        except Exception as exc:
            raise AbiError(f"Cannot encode arguments for {name}: {exc}") from exc
        return self.selector(name, len(args)) + encoded_args

    def unpack(self, name: str, data: bytes) -> tuple[Any, ...]:
        """ABI-decode the return data of ``name``."""
        func = self._function(name)
        output_types = [_canonical_type(p) for p in func.get("outputs", [])]
        if not output_types:
            return ()
        try:
            return tuple(decode(output_types, data))
        except Exception as exc:
            raise AbiError(f"Cannot decode result of {name}: {exc}") from exc
