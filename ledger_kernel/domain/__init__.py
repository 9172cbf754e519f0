"""Pure domain types: clock, hierarchy nodes, chart of accounts, balances."""
