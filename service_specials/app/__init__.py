"""
Dispensary specials service package.

Fetches store lists and per-store "specials" from the Dutchie Plus inventory
API for the storefront pages, with:
- Time-bounded, single-attempt GraphQL requests
- Cache-aside reads against a TTL key-value store
- Concurrent (optionally batched) per-store fan-out with partial failure

Structure:
- app.main: Service wiring from settings.
- app.adapters: GraphQL client and query documents.
- app.caching: Key-value cache port and implementations.
- app.domain: Store and product value objects.
- app.specials: Aggregation service and filtering rules.
- app.formatting: Display helpers (discounts, prices, category icons).
"""
