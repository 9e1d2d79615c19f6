import unittest
from contracting.client import ContractingClient

from deploy import deploy_currency, deploy_ledger, deploy_probe


class TestTzip7Contract(unittest.TestCase):
    def setUp(self):
        self.client = ContractingClient()
        self.client.flush() # Ensures a clean state

        # Define user accounts
        self.operator = 'sys' # Submits the currency and probe contracts
        self.alice = 'alice' # Ledger owner
        self.bob = 'bob'

        self.ledger_name = "con_tzip7"
        self.currency_name = "con_currency"
        self.probe_name = "con_ledger_probe"

        self.con_currency = deploy_currency(self.client, holder=self.operator, contract_name=self.currency_name)
        self.con_tzip7 = deploy_ledger(
            self.client,
            owner=self.alice,
            contract_name=self.ledger_name,
            native_currency=self.currency_name,
        )
        self.con_probe = deploy_probe(self.client, contract_name=self.probe_name)

        # Bob needs native currency to buy from the pool
        self.con_currency.transfer(amount=100000000, to=self.bob, signer=self.operator)

    def tearDown(self):
        self.client.flush()

    def balance(self, account):
        return self.con_tzip7.get_balance(owner=account)

    def total_supply(self):
        return self.con_tzip7.get_total_supply()

    def assert_supply_conserved(self):
        # The buy pool is held by the ledger contract's own account
        holders = [self.alice, self.bob, self.ledger_name]
        self.assertEqual(sum(self.balance(h) for h in holders), self.total_supply())

    def test_owner_and_metadata(self):
        state = self.con_tzip7.get_state()
        self.assertEqual(state['owner'], self.alice)
        self.assertEqual(state['metadata']['name'], "TEST")
        self.assertEqual(state['metadata']['symbol'], "TST")
        self.assertEqual(state['metadata']['token_id'], 7)
        self.assertEqual(state['total_supply'], 0)
        self.assertEqual(state['buy_price'], 0)
        self.assertEqual(state['token_buy_pool'], 0)
        self.assertFalse(state['paused'])

    def test_unseen_account_has_zero_balance(self):
        self.assertEqual(self.balance('nobody'), 0)
        self.assertIsNone(self.con_tzip7.ledger['nobody'])
        self.assertIsNone(self.con_tzip7.get_allowance(owner='nobody', spender=self.bob))

    def test_full_flow(self):
        print("\n--- Test: TZIP-7 full flow ---")

        # Mint 10000 tokens for Alice
        self.con_tzip7.mint(amount=10000, signer=self.alice)
        self.assertEqual(self.total_supply(), 10000)
        self.assertEqual(self.con_tzip7.ledger[self.alice]['balance'], 10000)

        # Alice cannot transfer more than she owns
        with self.assertRaisesRegex(AssertionError, "InsufficientBalance"):
            self.con_tzip7.transfer(source=self.alice, destination=self.bob, amount=12000, signer=self.alice)
        self.assertEqual(self.balance(self.alice), 10000)
        self.assertEqual(self.balance(self.bob), 0)

        # Alice sends 2000 to Bob
        self.con_tzip7.transfer(source=self.alice, destination=self.bob, amount=2000, signer=self.alice)
        self.assertEqual(self.balance(self.alice), 8000)
        self.assertEqual(self.balance(self.bob), 2000)
        self.assertEqual(self.total_supply(), 10000)

        # Bob cannot spend Alice's tokens without an allowance
        with self.assertRaisesRegex(AssertionError, "InsufficientAllowance"):
            self.con_tzip7.transfer(source=self.alice, destination=self.bob, amount=2000, signer=self.bob)
        self.assertEqual(self.balance(self.alice), 8000)
        self.assertEqual(self.balance(self.bob), 2000)
        self.assertIsNone(self.con_tzip7.get_allowance(owner=self.alice, spender=self.bob))

        # Bob sends 1000 back
        self.con_tzip7.transfer(source=self.bob, destination=self.alice, amount=1000, signer=self.bob)
        self.assertEqual(self.balance(self.alice), 9000)
        self.assertEqual(self.balance(self.bob), 1000)

        # Alice lets Bob spend 2000
        self.con_tzip7.approve(spender=self.bob, amount=2000, signer=self.alice)
        self.assertEqual(self.con_tzip7.ledger[self.alice]['allowances'][self.bob], 2000)

        # Changing a nonzero allowance straight to another nonzero value is refused
        with self.assertRaisesRegex(AssertionError, "UnsafeAllowanceChange"):
            self.con_tzip7.approve(spender=self.bob, amount=1000, signer=self.alice)
        self.assertEqual(self.con_tzip7.get_allowance(owner=self.alice, spender=self.bob), 2000)

        # Bob cannot go beyond his allowance
        with self.assertRaisesRegex(AssertionError, "InsufficientAllowance"):
            self.con_tzip7.transfer(source=self.alice, destination=self.bob, amount=3000, signer=self.bob)
        self.assertEqual(self.balance(self.alice), 9000)
        self.assertEqual(self.balance(self.bob), 1000)
        self.assertEqual(self.con_tzip7.get_allowance(owner=self.alice, spender=self.bob), 2000)

        # Bob spends 1000 on Alice's behalf, allowance drops by exactly that
        self.con_tzip7.transfer(source=self.alice, destination=self.bob, amount=1000, signer=self.bob)
        self.assertEqual(self.balance(self.alice), 8000)
        self.assertEqual(self.balance(self.bob), 2000)
        self.assertEqual(self.con_tzip7.get_allowance(owner=self.alice, spender=self.bob), 1000)

        # Alice burns 1000
        self.con_tzip7.burn(amount=1000, signer=self.alice)
        self.assertEqual(self.balance(self.alice), 7000)
        self.assertEqual(self.total_supply(), 9000)

        # Removing the approval leaves no entry at all
        self.con_tzip7.remove_approval(spender=self.bob, signer=self.alice)
        self.assertIsNone(self.con_tzip7.get_allowance(owner=self.alice, spender=self.bob))
        self.assertNotIn(self.bob, self.con_tzip7.ledger[self.alice]['allowances'])

        # Another contract can read the views
        self.assertEqual(self.con_probe.fetch_total_supply(token=self.ledger_name, signer=self.bob), 9000)
        self.assertEqual(self.con_probe.fetch_balance(token=self.ledger_name, owner=self.alice, signer=self.bob), 7000)
        self.assertEqual(self.con_probe.get_last_result(), 7000)

        self.con_tzip7.approve(spender=self.bob, amount=2000, signer=self.alice)
        allowance = self.con_probe.fetch_allowance(
            token=self.ledger_name, owner=self.alice, spender=self.bob, signer=self.bob
        )
        self.assertEqual(allowance, 2000)

        # Alice prices the token at 0.8 of the native currency (6 decimals) and fills the pool
        self.con_tzip7.set_buy_price(price=800000, signer=self.alice)
        self.assertEqual(self.con_tzip7.get_state()['buy_price'], 800000)

        self.con_tzip7.supply_buy_pool(amount=2000, signer=self.alice)
        self.assertEqual(self.con_tzip7.get_state()['token_buy_pool'], 2000)
        self.assertEqual(self.balance(self.alice), 5000)
        self.assertEqual(self.total_supply(), 9000)

        # Bob cannot buy more than the pool holds
        state = self.con_tzip7.get_state()
        too_many = state['token_buy_pool'] + 1000
        self.con_currency.approve(amount=too_many * state['buy_price'], to=self.ledger_name, signer=self.bob)
        with self.assertRaisesRegex(AssertionError, "InsufficientBuyPool"):
            self.con_tzip7.buy(token_amount=too_many, payment=too_many * state['buy_price'], signer=self.bob)
        self.assertEqual(self.con_tzip7.get_state()['token_buy_pool'], 2000)
        self.assertEqual(self.balance(self.bob), 2000)
        self.assertEqual(self.con_currency.balance_of(address=self.ledger_name), 0)
        self.assertEqual(self.con_currency.balance_of(address=self.bob), 100000000)

        # Bob buys 23 tokens
        tokens_to_buy = 23
        payment = state['buy_price'] * tokens_to_buy
        bob_before = self.balance(self.bob)
        pool_before = state['token_buy_pool']

        self.con_tzip7.buy(token_amount=tokens_to_buy, payment=payment, signer=self.bob)

        state = self.con_tzip7.get_state()
        self.assertEqual(state['token_buy_pool'], pool_before - tokens_to_buy)
        self.assertEqual(self.balance(self.bob), bob_before + tokens_to_buy)
        self.assertEqual(self.con_currency.balance_of(address=self.ledger_name), payment)
        self.assertEqual(self.con_currency.balance_of(address=self.bob), 100000000 - payment)

        self.assert_supply_conserved()
        print(f"Final state: {state}")

    def test_non_owner_cannot_mint(self):
        with self.assertRaisesRegex(AssertionError, "NotAuthorized"):
            self.con_tzip7.mint(amount=500, signer=self.bob)
        self.assertEqual(self.total_supply(), 0)
        self.assertEqual(self.balance(self.bob), 0)

    def test_non_owner_cannot_set_price_or_supply_pool(self):
        self.con_tzip7.mint(amount=1000, signer=self.alice)
        self.con_tzip7.transfer(source=self.alice, destination=self.bob, amount=500, signer=self.alice)

        with self.assertRaisesRegex(AssertionError, "NotAuthorized"):
            self.con_tzip7.set_buy_price(price=1, signer=self.bob)
        with self.assertRaisesRegex(AssertionError, "NotAuthorized"):
            self.con_tzip7.supply_buy_pool(amount=100, signer=self.bob)

        state = self.con_tzip7.get_state()
        self.assertEqual(state['buy_price'], 0)
        self.assertEqual(state['token_buy_pool'], 0)
        self.assertEqual(self.balance(self.bob), 500)

    def test_supply_buy_pool_needs_owner_balance(self):
        self.con_tzip7.mint(amount=100, signer=self.alice)
        with self.assertRaisesRegex(AssertionError, "InsufficientBalance"):
            self.con_tzip7.supply_buy_pool(amount=101, signer=self.alice)
        self.assertEqual(self.balance(self.alice), 100)
        self.assertEqual(self.con_tzip7.get_state()['token_buy_pool'], 0)

    def test_burn_more_than_balance_fails(self):
        self.con_tzip7.mint(amount=100, signer=self.alice)
        with self.assertRaisesRegex(AssertionError, "InsufficientBalance"):
            self.con_tzip7.burn(amount=101, signer=self.alice)
        self.assertEqual(self.balance(self.alice), 100)
        self.assertEqual(self.total_supply(), 100)

    def test_approve_zero_then_new_amount(self):
        self.con_tzip7.approve(spender=self.bob, amount=2000, signer=self.alice)

        # Resetting to zero is always allowed and keeps an explicit zero entry
        self.con_tzip7.approve(spender=self.bob, amount=0, signer=self.alice)
        self.assertEqual(self.con_tzip7.get_allowance(owner=self.alice, spender=self.bob), 0)

        self.con_tzip7.approve(spender=self.bob, amount=1000, signer=self.alice)
        self.assertEqual(self.con_tzip7.get_allowance(owner=self.alice, spender=self.bob), 1000)

        # Zero over zero as well
        self.con_tzip7.approve(spender='carol', amount=0, signer=self.alice)
        self.con_tzip7.approve(spender='carol', amount=0, signer=self.alice)
        self.assertEqual(self.con_tzip7.get_allowance(owner=self.alice, spender='carol'), 0)


if __name__ == '__main__':
    unittest.main()
