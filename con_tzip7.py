# con_tzip7.py
# Fungible token ledger (TZIP-7 / FA1.2 style) with an owner-priced buy pool.
I = importlib

ledger = Hash() # address -> {"balance": int, "allowances": {spender: int}}
metadata = Hash() # name, symbol, decimals, token_id, extras. Written once in seed()
settings = Hash() # owner, pausable, error_style, native_currency

total_supply = Variable(default_value=0)
buy_price = Variable(default_value=0)
paused = Variable(default_value=False)
reentrancy_guard_active = Variable(default_value=False)

ERROR_STYLES = ['kind', 'tzip7', 'text']

# Reason strings for error_style == 'tzip7'
TZIP7_CODES = {
    'InsufficientBalance': 'NotEnoughBalance',
    'InsufficientAllowance': 'NotEnoughAllowance',
    'UnsafeAllowanceChange': 'UnsafeAllowanceChange',
    'InsufficientBuyPool': 'InsufficientBuyPool',
    'NotAuthorized': 'NotAuthorized',
    'ContractPaused': 'ContractPaused',
    'PaymentMismatch': 'PaymentMismatch',
    'NegativeAmount': 'NegativeAmount',
    'NotPausable': 'NotPausable',
    'ReservedAccount': 'ReservedAccount',
    'ContractBusy': 'ContractBusy',
}

# Reason strings for error_style == 'text'
TEXT_REASONS = {
    'InsufficientBalance': 'Balance is too low for this operation!',
    'InsufficientAllowance': 'Allowance is too low for this transfer!',
    'UnsafeAllowanceChange': 'Reset the allowance to zero before changing it!',
    'InsufficientBuyPool': 'Not enough tokens left in the buy pool!',
    'NotAuthorized': 'Only the owner can call this entrypoint!',
    'ContractPaused': 'Contract is paused!',
    'PaymentMismatch': 'Payment must equal token amount times buy price!',
    'NegativeAmount': 'Amounts cannot be negative!',
    'NotPausable': 'This contract cannot be paused!',
    'ReservedAccount': 'The buy pool account only moves through supply_buy_pool and buy!',
    'ContractBusy': 'Contract is busy, please try again.',
}

# Events
Transfer = LogEvent(
    event="transfer",
    params={
        "source": {'type':str, 'idx':True},
        "destination": {'type':str, 'idx':True},
        "amount": {'type':(int, float, decimal)}
    })

Approval = LogEvent(
    event="approval",
    params={
        "owner": {'type':str, 'idx':True},
        "spender": {'type':str, 'idx':True},
        "amount": {'type':(int, float, decimal)}
    })

ApprovalRemoved = LogEvent(
    event="approval_removed",
    params={
        "owner": {'type':str, 'idx':True},
        "spender": {'type':str, 'idx':True}
    })

Mint = LogEvent(
    event="mint",
    params={
        "to": {'type':str, 'idx':True},
        "amount": {'type':(int, float, decimal)},
        "total_supply": {'type':(int, float, decimal)}
    })

Burn = LogEvent(
    event="burn",
    params={
        "account": {'type':str, 'idx':True},
        "amount": {'type':(int, float, decimal)},
        "total_supply": {'type':(int, float, decimal)}
    })

BuyPriceSet = LogEvent(
    event="buy_price_set",
    params={
        "price": {'type':(int, float, decimal)}
    })

BuyPoolSupplied = LogEvent(
    event="buy_pool_supplied",
    params={
        "amount": {'type':(int, float, decimal)},
        "token_buy_pool": {'type':(int, float, decimal)}
    })

Purchase = LogEvent(
    event="purchase",
    params={
        "buyer": {'type':str, 'idx':True},
        "token_amount": {'type':(int, float, decimal)},
        "payment": {'type':(int, float, decimal)},
        "token_buy_pool": {'type':(int, float, decimal)}
    })

PauseChanged = LogEvent(
    event="pause_changed",
    params={
        "state": {'type':str, 'idx':False}
    })

@construct
def seed(owner: str = None, name: str = 'TEST', symbol: str = 'TST', decimals: int = 0,
         token_id: int = 7, extras: dict = None, pausable: bool = True,
         error_style: str = 'kind', native_currency: str = 'currency'):
    assert error_style in ERROR_STYLES, f'Unknown error style {error_style}!'
    assert decimals >= 0, 'decimals cannot be negative!'

    settings['owner'] = owner or ctx.caller
    settings['pausable'] = pausable
    settings['error_style'] = error_style
    settings['native_currency'] = native_currency

    metadata['name'] = name
    metadata['symbol'] = symbol
    metadata['decimals'] = decimals
    metadata['token_id'] = token_id
    metadata['extras'] = extras or {}

    total_supply.set(0)
    buy_price.set(0)
    paused.set(False)
    reentrancy_guard_active.set(False)

# --- Error presentation ---
def reason(kind: str):
    style = settings['error_style']
    if style == 'tzip7':
        return TZIP7_CODES[kind]
    if style == 'text':
        return TEXT_REASONS[kind]
    return kind

# --- Guards ---
def assert_open():
    if settings['pausable']:
        assert not paused.get(), reason('ContractPaused')
    assert not reentrancy_guard_active.get(), reason('ContractBusy')

def assert_owner():
    assert ctx.caller == settings['owner'], reason('NotAuthorized')

def assert_amount(amount: int):
    assert amount >= 0, reason('NegativeAmount')

# --- Ledger store ---
def get_account(address: str):
    account = ledger[address]
    if account is None:
        return {"balance": 0, "allowances": {}}
    return account

def put_account(address: str, account: dict):
    assert account["balance"] >= 0, reason('InsufficientBalance')
    for spender in account["allowances"]:
        assert account["allowances"][spender] >= 0, reason('InsufficientAllowance')
    ledger[address] = account

def move_tokens(source: str, destination: str, amount: int):
    sender = get_account(source)
    assert sender["balance"] >= amount, reason('InsufficientBalance')
    sender["balance"] -= amount
    put_account(source, sender)

    # Re-read so a self-transfer sees the debit above
    receiver = get_account(destination)
    receiver["balance"] += amount
    put_account(destination, receiver)

def token_metadata():
    return {
        "name": metadata['name'],
        "symbol": metadata['symbol'],
        "decimals": metadata['decimals'],
        "token_id": metadata['token_id'],
        "extras": metadata['extras'],
    }

# --- Transfers and approvals ---
@export
def transfer(source: str, destination: str, amount: int):
    assert_open()
    assert_amount(amount)
    # The buy pool reserve only moves through supply_buy_pool and buy
    assert source != ctx.this and destination != ctx.this, reason('ReservedAccount')

    spender = ctx.caller
    if spender != source:
        sender = get_account(source)
        allowance = sender["allowances"].get(spender, 0)
        assert allowance >= amount, reason('InsufficientAllowance')
        assert sender["balance"] >= amount, reason('InsufficientBalance')
        # Consumed by exactly the amount spent. A missing entry stays missing.
        if spender in sender["allowances"]:
            sender["allowances"][spender] = allowance - amount
            put_account(source, sender)

    move_tokens(source, destination, amount)

    Transfer({"source": source, "destination": destination, "amount": amount})

@export
def approve(spender: str, amount: int):
    assert_open()
    assert_amount(amount)

    account = get_account(ctx.caller)
    already_approved = account["allowances"].get(spender, 0)
    # Changing one nonzero allowance to another lets the spender front-run the
    # change and spend both. Going through zero closes that window.
    assert already_approved == 0 or amount == 0, reason('UnsafeAllowanceChange')

    account["allowances"][spender] = amount
    put_account(ctx.caller, account)

    Approval({"owner": ctx.caller, "spender": spender, "amount": amount})

@export
def remove_approval(spender: str):
    assert_open()

    account = get_account(ctx.caller)
    account["allowances"].pop(spender, None)
    put_account(ctx.caller, account)

    ApprovalRemoved({"owner": ctx.caller, "spender": spender})

# --- Supply control ---
@export
def mint(amount: int):
    assert_open()
    assert_owner()
    assert_amount(amount)

    owner = settings['owner']
    account = get_account(owner)
    account["balance"] += amount
    put_account(owner, account)
    total_supply.set(total_supply.get() + amount)

    Mint({"to": owner, "amount": amount, "total_supply": total_supply.get()})

@export
def burn(amount: int):
    assert_open()
    assert_amount(amount)

    account = get_account(ctx.caller)
    assert account["balance"] >= amount, reason('InsufficientBalance')
    account["balance"] -= amount
    put_account(ctx.caller, account)
    total_supply.set(total_supply.get() - amount)

    Burn({"account": ctx.caller, "amount": amount, "total_supply": total_supply.get()})

# --- Buy pool ---
@export
def set_buy_price(price: int):
    assert_open()
    assert_owner()
    assert_amount(price)

    buy_price.set(price)

    BuyPriceSet({"price": price})

@export
def supply_buy_pool(amount: int):
    assert_open()
    assert_owner()
    assert_amount(amount)

    # The reserve is the balance of this contract's own account
    move_tokens(ctx.caller, ctx.this, amount)

    BuyPoolSupplied({"amount": amount, "token_buy_pool": get_account(ctx.this)["balance"]})

@export
def buy(token_amount: int, payment: int):
    assert_open()
    assert_amount(token_amount)
    assert_amount(payment)

    buyer = ctx.caller
    pool_account = ctx.this

    assert token_amount <= get_account(pool_account)["balance"], reason('InsufficientBuyPool')
    assert payment == token_amount * buy_price.get(), reason('PaymentMismatch')

    if payment > 0:
        reentrancy_guard_active.set(True)
        currency = I.import_module(settings['native_currency'])
        # The buyer must have approved this contract on the currency contract
        currency.transfer_from(amount=payment, to=pool_account, main_account=buyer)
        reentrancy_guard_active.set(False)

    move_tokens(pool_account, buyer, token_amount)

    Purchase({
        "buyer": buyer,
        "token_amount": token_amount,
        "payment": payment,
        "token_buy_pool": get_account(pool_account)["balance"]
    })

# --- Governance ---
@export
def set_pause(state: bool):
    assert_owner()
    assert settings['pausable'], reason('NotPausable')

    paused.set(state)

    PauseChanged({"state": "paused" if state else "running"})

# --- Views ---
@export
def get_balance(owner: str):
    return get_account(owner)["balance"]

@export
def get_allowance(owner: str, spender: str):
    # None when there is no entry, 0 when one was explicitly set to zero
    return get_account(owner)["allowances"].get(spender)

@export
def get_total_supply():
    return total_supply.get()

@export
def get_metadata():
    return token_metadata()

@export
def get_state():
    return {
        "owner": settings['owner'],
        "metadata": token_metadata(),
        "total_supply": total_supply.get(),
        "buy_price": buy_price.get(),
        "token_buy_pool": get_account(ctx.this)["balance"],
        "pausable": settings['pausable'],
        "paused": paused.get(),
    }
