# con_currency.py
# XSC001 fungible token standing in for the chain's native currency.
# The ledger's buy() pulls payments from it with transfer_from.
balances = Hash(default_value=0)
metadata = Hash()

@construct
def seed(vk: str = None, amount: int = 1000000000000):
    holder = vk or ctx.caller
    balances[holder] = amount
    metadata['token_name'] = "NATIVE CURRENCY"
    metadata['token_symbol'] = "XIAN"
    metadata['total_supply'] = amount
    metadata['operator'] = ctx.caller

@export
def transfer(amount: int, to: str):
    assert amount > 0, 'Cannot send negative balances!'
    sender = ctx.caller

    assert balances[sender] >= amount, f'Transfer amount exceeds balance for sender {sender}!'

    balances[sender] -= amount
    balances[to] += amount

@export
def approve(amount: int, to: str):
    assert amount >= 0, 'Cannot approve negative!'
    balances[ctx.caller, to] = amount

@export
def transfer_from(amount: int, to: str, main_account: str):
    assert amount > 0, 'Cannot send negative balances!'
    spender = ctx.caller

    allowance = balances[main_account, spender]
    assert allowance >= amount, \
        f'Transfer amount {amount} exceeds allowance {allowance} for {main_account} by spender {spender}!'

    main_account_bal = balances[main_account]
    assert main_account_bal >= amount, f'Transfer amount exceeds balance for {main_account}!'

    balances[main_account, spender] = allowance - amount
    balances[main_account] = main_account_bal - amount
    balances[to] += amount

@export
def balance_of(address: str):
    return balances[address]

@export
def allowance(owner: str, spender: str):
    return balances[owner, spender]
