"""
LINE transport adapter.

Responsibilities:
- Hold the channel credentials and build the LINE API client and webhook parser.
- Translate LINE webhook events into ``InboundEvent``.
- Convert outbound chat messages into LINE message objects and deliver them.
- Dispatch a webhook batch: users in parallel, each user's events in order.
"""
