import logging
from pathlib import Path

log = logging.getLogger(__name__)

CONTRACTS_DIR = Path(__file__).resolve().parent

LEDGER_CONTRACT = "con_tzip7"
CURRENCY_CONTRACT = "con_currency"
PROBE_CONTRACT = "con_ledger_probe"

# Initial storage of the reference deployment
INITIAL_STORAGE = {
    "name": "TEST",
    "symbol": "TST",
    "decimals": 0,
    "token_id": 7,
    "extras": {},
    "pausable": True,
    "error_style": "kind",
}


def contract_source(filename):
    with open(CONTRACTS_DIR / filename) as f:
        return f.read()


def deploy_currency(client, holder="sys", amount=1000000000000, contract_name=CURRENCY_CONTRACT, signer="sys"):
    """Submit the native currency contract, minting `amount` to `holder`."""
    client.submit(
        contract_source("con_currency.py"),
        name=contract_name,
        signer=signer,
        constructor_args={"vk": holder, "amount": amount},
    )
    log.info("submitted %s, %s units held by %s", contract_name, amount, holder)
    return client.get_contract(contract_name)


def deploy_ledger(client, owner, contract_name=LEDGER_CONTRACT, native_currency=CURRENCY_CONTRACT, signer=None, **storage):
    """
    Submit the ledger contract. `storage` overrides any key of INITIAL_STORAGE,
    e.g. pausable=False or error_style="text".
    """
    unknown = set(storage) - set(INITIAL_STORAGE)
    if unknown:
        raise ValueError(f"unknown initial storage keys: {sorted(unknown)}")

    constructor_args = dict(INITIAL_STORAGE, **storage)
    constructor_args["owner"] = owner
    constructor_args["native_currency"] = native_currency

    client.submit(
        contract_source("con_tzip7.py"),
        name=contract_name,
        signer=signer or owner,
        constructor_args=constructor_args,
    )
    log.info(
        "submitted %s owned by %s (pausable=%s, error_style=%s)",
        contract_name, owner, constructor_args["pausable"], constructor_args["error_style"],
    )
    return client.get_contract(contract_name)


def deploy_probe(client, contract_name=PROBE_CONTRACT, signer="sys"):
    client.submit(contract_source("con_ledger_probe.py"), name=contract_name, signer=signer)
    log.info("submitted %s", contract_name)
    return client.get_contract(contract_name)
