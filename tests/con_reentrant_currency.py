# con_reentrant_currency.py
# Currency that calls back into the ledger from inside transfer_from.
I = importlib

balances = Hash(default_value=0)

re_entry_target = Variable()
re_entry_token_amount = Variable()

@construct
def seed(vk: str = None, amount: int = 1000000):
    balances[vk or ctx.caller] = amount

@export
def configure_re_entrancy(ledger_name: str, token_amount: int):
    re_entry_target.set(ledger_name)
    re_entry_token_amount.set(token_amount)

@export
def approve(amount: int, to: str):
    balances[ctx.caller, to] = amount

@export
def transfer_from(amount: int, to: str, main_account: str):
    spender = ctx.caller

    assert balances[main_account, spender] >= amount, 'Insufficient allowance'
    assert balances[main_account] >= amount, 'Insufficient balance'

    balances[main_account, spender] -= amount
    balances[main_account] -= amount
    balances[to] += amount

    target = re_entry_target.get()
    if target:
        # ctx.caller inside the ledger is this contract
        ledger = I.import_module(target)
        ledger.buy(token_amount=re_entry_token_amount.get(), payment=0)

@export
def balance_of(address: str):
    return balances[address]
