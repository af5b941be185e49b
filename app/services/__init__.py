"""
Services module for business logic separation.

- code_generator: random candidate short codes
- link_registry: the only component that reads and writes links
"""
