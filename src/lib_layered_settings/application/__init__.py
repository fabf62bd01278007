"""Application services: flatten/merge policy, typed binding, reload holder."""
