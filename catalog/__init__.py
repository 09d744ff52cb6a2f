"""The CulinaryCatalog core. Centres around the `SyncEngine`.

What does it do?

- Fetch the whole recipe catalog from one remote JSON endpoint.
- Keep a local copy of it, replaced wholesale on every refresh.
- Cache recipe photos next to the records, whenever they turn up.
- Hand a sorted, searchable list to whatever is drawing it.

Everything here is handed its collaborators. Nothing reads config or
holds a global client, so fakes drop straight in.
"""
