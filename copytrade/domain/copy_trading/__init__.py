"""Copy Trading bounded context.

Провайдер відкриває/закриває позицію, кожен follower отримує власну
CopyExecution: sized, risk-checked і записана в ledger.
"""
