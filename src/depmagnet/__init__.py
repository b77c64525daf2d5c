"""Dependency vendoring and module-manifest generation for Swift projects."""
