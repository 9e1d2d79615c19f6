# con_ledger_probe.py
# Reads a TZIP-7 ledger's views from another contract and keeps the last answer.
I = importlib

last_result = Variable()

ledger_interface = [
    I.Func('get_balance', args=('owner',)),
    I.Func('get_allowance', args=('owner', 'spender')),
    I.Func('get_total_supply'),
]

def load_ledger(token: str):
    token_contract = I.import_module(token)
    assert I.enforce_interface(token_contract, ledger_interface), 'token contract is not a TZIP-7 ledger'
    return token_contract

@export
def fetch_total_supply(token: str):
    value = load_ledger(token).get_total_supply()
    last_result.set(value)
    return value

@export
def fetch_balance(token: str, owner: str):
    value = load_ledger(token).get_balance(owner=owner)
    last_result.set(value)
    return value

@export
def fetch_allowance(token: str, owner: str, spender: str):
    value = load_ledger(token).get_allowance(owner=owner, spender=spender)
    last_result.set(value)
    return value

@export
def get_last_result():
    return last_result.get()
