"""
Core module for the Helix task bot.

This package contains the configuration, retry engine, account pipeline,
batch runner, scheduler and the Movement node / faucet clients that drive
the testnet task automation.

Submodules:
    config: Application settings (``BotSettings``, ``TaskConfig``, ``RetryConfig``) via Pydantic.
    account: Ed25519 ``Account`` and address derivation.
    sources: Private-key and proxy file loading.
    chain_client: ``MovementClient`` / ``FaucetClient`` over aiohttp.
    errors: Typed remote and account errors.
    results: ``OperationResult``, ``TxReceipt``, ``RunOutcome``, ``BatchSummary``.
    retry: ``RetryPolicy`` exponential back-off with jitter.
    registry: Factory registry mapping operation names to classes.
    pipeline: ``AccountPipeline`` per-account operation sequence.
    batch: ``BatchRunner`` sequential pass over all accounts.
    scheduler: ``Scheduler`` single or recurring runs.
    reporter: ``TaskReporter`` progress logging.
    dashboard: Rich configuration / task summaries.
    logging_setup: Compressed rotating file + safe console logging.
"""
