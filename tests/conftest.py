"""
Pytest fixtures for the tx3 SDK tests.
"""
import pathlib

import pytest

from tx3_sdk._rate_limited_log import reset_rate_limited_log
from tx3_sdk.tii import Protocol
from tx3_sdk.tir import AssetExpr, Utxo, UtxoRef
from tx3_sdk.trp import Client, ClientOptions

FIXTURES = pathlib.Path(__file__).parent / "fixtures"

TEST_ENDPOINT = "https://trp.example.com/"
TEST_API_KEY = "test-api-key"

SENDER = "addr1qxsender000000000000000000000000000000000000000000000000000"
RECEIVER = "addr1qxreceiver0000000000000000000000000000000000000000000000000"
MIDDLEMAN = "addr1qxmiddleman000000000000000000000000000000000000000000000000"


@pytest.fixture(autouse=True)
def _clear_rate_limited_log():
    """Every test starts with an empty suppression cache."""
    reset_rate_limited_log()
    yield
    reset_rate_limited_log()


@pytest.fixture
def transfer_tii_path():
    return FIXTURES / "transfer.tii.json"


@pytest.fixture
def protocol(transfer_tii_path):
    """Protocol loaded from the transfer fixture."""
    return Protocol.from_file(transfer_tii_path)


@pytest.fixture
def transfer_invocation(protocol):
    """Invocation of the transfer tx on the preview profile, nothing bound by the caller."""
    return protocol.invoke("transfer", "preview")


@pytest.fixture
def sample_utxo():
    return Utxo(
        ref=UtxoRef(txid="ab" * 32, index=0),
        address=SENDER,
        assets=[AssetExpr.native(50_000_000)],
    )


@pytest.fixture
def trp_options():
    return ClientOptions(
        endpoint=TEST_ENDPOINT,
        headers={"dmtr-api-key": TEST_API_KEY},
    )


@pytest.fixture
def trp_client(trp_options):
    """TRP client pointed at a mocked endpoint."""
    client = Client(trp_options)
    yield client
    client.close()
