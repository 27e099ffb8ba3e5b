"""Core package: the canonical log store and cross-cutting functionality.

- **canonical**: Ordered, hierarchical store with path-based set/add semantics
- **context**: Ambient propagation of the store through contextvars
- **config**: Centralized configuration management with environment support
- **exceptions**: Structured exception hierarchy with error codes
- **logging**: Loguru setup and the default canonical log sink
- **types**: Type aliases for better code clarity
"""
