"""
Unit tests for the snarkjs proving backend.

The snarkjs CLI is replaced by a fake runner that writes the files
`groth16 fullprove` would produce.
"""

import json
import subprocess
from pathlib import Path

import httpx
import pytest

from zkmail.exceptions import ProofGenerationError, ResourceError
from zkmail.zk.models import PublicSignals, ZKProof
from zkmail.zk.snarkjs import SnarkjsBackend


PROOF_JSON = {
    "pi_a": ["1", "2", "1"],
    "pi_b": [["3", "4"], ["5", "6"], ["1", "0"]],
    "pi_c": ["7", "8", "1"],
    "protocol": "groth16",
    "curve": "bn128",
}

PUBLIC_JSON = ["1", "1001", "2002", "0"]

WITNESS = {
    "allowedHashes": ["1001", "2002", "0"],
    "username": ["97"] + ["0"] * 9,
    "usernameLength": "1",
    "salt": "1000",
}


class FakeSnarkjs:
    """Stand-in for the snarkjs CLI."""

    def __init__(
        self,
        returncode=0,
        stdout="",
        stderr="",
        write_outputs=True,
        error=None,
        proof=PROOF_JSON,
        public=PUBLIC_JSON,
    ):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.write_outputs = write_outputs
        self.error = error
        self.proof = proof
        self.public = public
        self.calls: list[list[str]] = []
        self.inputs: list[dict] = []

    async def __call__(self, args, cwd):
        self.calls.append(args)
        if self.error is not None:
            raise self.error

        if args[1] == "fullprove":
            self.inputs.append(json.loads(Path(args[2]).read_text()))
            if self.write_outputs:
                Path(args[5]).write_text(json.dumps(self.proof))
                Path(args[6]).write_text(json.dumps(self.public))

        return subprocess.CompletedProcess(
            args, self.returncode, stdout=self.stdout, stderr=self.stderr
        )


@pytest.fixture
def artifacts(tmp_path) -> tuple[Path, Path]:
    wasm = tmp_path / "twitter-login.wasm"
    zkey = tmp_path / "twitter-login_0001.zkey"
    wasm.write_bytes(b"\x00asm")
    zkey.write_bytes(b"zkey")
    return wasm, zkey


def _backend(fake: FakeSnarkjs, **kwargs) -> SnarkjsBackend:
    backend = SnarkjsBackend(command=["snarkjs"], timeout=5, **kwargs)
    backend._run = fake
    return backend


class TestSnarkjsGenerate:
    """Tests for `groth16 fullprove`."""

    @pytest.mark.asyncio
    async def test_generate(self, artifacts):
        wasm, zkey = artifacts
        fake = FakeSnarkjs()

        bundle = await _backend(fake).generate(wasm, zkey, WITNESS)

        assert bundle.proof == ZKProof(**PROOF_JSON)
        assert bundle.public_signals.signals == PUBLIC_JSON
        assert bundle.metadata.backend == "snarkjs"
        assert bundle.metadata.circuit_name == "twitter-login"

        args = fake.calls[0]
        assert args[:2] == ["groth16", "fullprove"]
        assert args[3] == str(wasm)
        assert args[4] == str(zkey)
        assert fake.inputs == [WITNESS]

    @pytest.mark.asyncio
    async def test_work_dir_removed(self, artifacts):
        wasm, zkey = artifacts
        fake = FakeSnarkjs()

        await _backend(fake).generate(wasm, zkey, WITNESS)

        assert not Path(fake.calls[0][2]).parent.exists()

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, artifacts):
        wasm, zkey = artifacts
        fake = FakeSnarkjs(returncode=1, stderr="Error: Scalar size does not match")

        with pytest.raises(ProofGenerationError, match="Scalar size"):
            await _backend(fake).generate(wasm, zkey, WITNESS)

    @pytest.mark.asyncio
    async def test_missing_output(self, artifacts):
        wasm, zkey = artifacts

        with pytest.raises(ProofGenerationError, match="unreadable output"):
            await _backend(FakeSnarkjs(write_outputs=False)).generate(wasm, zkey, WITNESS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "proof,public",
        [
            ({"pi_a": ["1"]}, PUBLIC_JSON),
            (["not", "an", "object"], PUBLIC_JSON),
            (PROOF_JSON, 42),
        ],
    )
    async def test_wrong_output_shape(self, artifacts, proof, public):
        wasm, zkey = artifacts
        fake = FakeSnarkjs(proof=proof, public=public)

        with pytest.raises(ProofGenerationError, match="unreadable output"):
            await _backend(fake).generate(wasm, zkey, WITNESS)

    @pytest.mark.asyncio
    async def test_snarkjs_not_installed(self, artifacts):
        wasm, zkey = artifacts
        fake = FakeSnarkjs(error=FileNotFoundError("snarkjs"))

        with pytest.raises(ProofGenerationError, match="Unable to run snarkjs"):
            await _backend(fake).generate(wasm, zkey, WITNESS)

    @pytest.mark.asyncio
    async def test_timeout(self, artifacts):
        wasm, zkey = artifacts
        fake = FakeSnarkjs(error=subprocess.TimeoutExpired(["snarkjs"], 5))

        with pytest.raises(ProofGenerationError):
            await _backend(fake).generate(wasm, zkey, WITNESS)

    @pytest.mark.asyncio
    async def test_missing_wasm(self, tmp_path):
        fake = FakeSnarkjs()

        with pytest.raises(ResourceError, match="Artifact not found"):
            await _backend(fake).generate(tmp_path / "missing.wasm", tmp_path / "c.zkey", WITNESS)

        assert fake.calls == []

    @pytest.mark.asyncio
    async def test_url_artifacts_downloaded(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            return httpx.Response(200, content=b"artifact")

        fake = FakeSnarkjs()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await _backend(fake, http_client=client).generate(
                "https://circuits.example.org/twitter-login_js/twitter-login.wasm",
                "https://circuits.example.org/twitter-login_0001.zkey",
                WITNESS,
            )

        assert requested == ["/twitter-login_js/twitter-login.wasm", "/twitter-login_0001.zkey"]
        assert Path(fake.calls[0][3]).name == "twitter-login.wasm"


class TestSnarkjsVerify:
    """Tests for `groth16 verify`."""

    @pytest.mark.asyncio
    async def test_valid(self):
        fake = FakeSnarkjs(stdout="[INFO]  snarkJS: OK!")

        is_valid = await _backend(fake).verify(
            {"protocol": "groth16"}, PublicSignals(signals=PUBLIC_JSON), ZKProof(**PROOF_JSON)
        )

        assert is_valid is True
        assert fake.calls[0][:2] == ["groth16", "verify"]

    @pytest.mark.asyncio
    async def test_invalid(self):
        fake = FakeSnarkjs(returncode=1, stdout="[ERROR] snarkJS: Invalid proof")

        assert await _backend(fake).verify(
            {"protocol": "groth16"}, PublicSignals(signals=PUBLIC_JSON), ZKProof(**PROOF_JSON)
        ) is False

    @pytest.mark.asyncio
    async def test_zero_exit_without_ok(self):
        fake = FakeSnarkjs(stdout="")

        assert await _backend(fake).verify(
            {"protocol": "groth16"}, PublicSignals(signals=PUBLIC_JSON), ZKProof(**PROOF_JSON)
        ) is False

    @pytest.mark.asyncio
    async def test_not_installed(self):
        fake = FakeSnarkjs(error=FileNotFoundError("snarkjs"))

        assert await _backend(fake).verify(
            {"protocol": "groth16"}, PublicSignals(signals=PUBLIC_JSON), ZKProof(**PROOF_JSON)
        ) is False


class TestSnarkjsDefaults:
    """Tests for configuration defaults."""

    def test_command_from_settings(self):
        backend = SnarkjsBackend()

        assert backend.command == ["npx", "snarkjs"]
        assert backend.timeout == 120
        assert backend.name == "snarkjs"
