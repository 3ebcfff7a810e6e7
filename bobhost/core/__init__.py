"""Core components: hashing, archive validation, storage, registry, serving."""
