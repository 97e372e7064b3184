"""Proving backends.

The circuit is executed and proved by an external tool. The default
backend drives the snarkjs CLI (``groth16 fullprove``) in a subprocess:
the witness input is written as JSON, the witness program (wasm) and the
proving key (zkey) are loaded by snarkjs itself.
"""

import asyncio
import json
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from zkcred.config import Settings
from zkcred.exceptions import ArtifactLoadError, BackendError

logger = logging.getLogger(__name__)

BackendResult = Tuple[Any, List[str]]


class ProvingBackend(Protocol):
    """Turns a witness input set into (proof, public_signals)."""

    async def prove(
        self,
        witness_inputs: Mapping[str, Any],
        wasm_path: Path,
        zkey_path: Path,
    ) -> BackendResult:
        ...


class SnarkjsBackend:
    """
    groth16 prover backed by the snarkjs command line tool.

    Each call runs one ``snarkjs groth16 fullprove`` process in its own
    temporary directory. Nothing is cached between calls.
    """

    def __init__(self, binary: str = "snarkjs", timeout: Optional[float] = None):
        """
        Args:
            binary: snarkjs executable name or path
            timeout: Optional wall-clock limit per proof, in seconds
        """
        self.binary = binary
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, timeout: Optional[float] = None) -> "SnarkjsBackend":
        """Backend using the configured snarkjs executable."""
        return cls(binary=settings.snarkjs_binary, timeout=timeout)

    async def prove(
        self,
        witness_inputs: Mapping[str, Any],
        wasm_path: Path,
        zkey_path: Path,
    ) -> BackendResult:
        """
        Generate a proof.

        Raises:
            ArtifactLoadError: If an artifact or the snarkjs binary is missing
            BackendError: If snarkjs fails or its output cannot be read
        """
        wasm_path = Path(wasm_path)
        zkey_path = Path(zkey_path)
        _check_artifact(wasm_path, "witness generator")
        _check_artifact(zkey_path, "proving key")

        executable = shutil.which(self.binary)
        if executable is None:
            raise ArtifactLoadError(f"snarkjs binary not found: {self.binary}")

        with tempfile.TemporaryDirectory(prefix="zkcred-") as tmp_dir:
            tmp = Path(tmp_dir)
            input_path = tmp / "input.json"
            proof_path = tmp / "proof.json"
            public_path = tmp / "public.json"

            input_path.write_text(json.dumps(dict(witness_inputs)), encoding="utf-8")

            await self._run(
                executable,
                "groth16",
                "fullprove",
                str(input_path),
                str(wasm_path),
                str(zkey_path),
                str(proof_path),
                str(public_path),
            )

            proof = _read_json(proof_path, "proof")
            public_signals = _read_json(public_path, "public signals")

        if not isinstance(public_signals, list):
            raise BackendError("snarkjs public signals must be a JSON list")

        return proof, [str(s) for s in public_signals]

    async def _run(self, *args: str) -> None:
        logger.info(f"Running {' '.join(args[1:3])} with {args[4]}")
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise BackendError(f"snarkjs timed out after {self.timeout}s")

        if process.returncode != 0:
            message = (stderr or stdout).decode("utf-8", errors="replace").strip()
            logger.error(f"snarkjs exited with {process.returncode}: {message}")
            raise BackendError(f"snarkjs failed (exit {process.returncode}): {message}")


def _check_artifact(path: Path, label: str) -> None:
    if not path.is_file():
        raise ArtifactLoadError(f"Cannot load {label} at {path}")


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise BackendError(f"Cannot read snarkjs {label} output: {e}") from e


def proof_to_calldata(proof: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reshape a snarkjs groth16 proof into the (a, b, c) form verifiers take.

    ``b`` coordinates are swapped inside each pair, as the pairing
    precompile expects.
    """
    try:
        return {
            "a": [proof["pi_a"][0], proof["pi_a"][1]],
            "b": [
                [proof["pi_b"][0][1], proof["pi_b"][0][0]],
                [proof["pi_b"][1][1], proof["pi_b"][1][0]],
            ],
            "c": [proof["pi_c"][0], proof["pi_c"][1]],
        }
    except (KeyError, IndexError, TypeError) as e:
        raise BackendError(f"Not a groth16 proof: {e}") from e
