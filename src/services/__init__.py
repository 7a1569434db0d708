"""Services package - Business logic layer for Podi Tracker.

This package contains the costing engine and the service modules that sit
between the data store and the user-facing tools.

Architecture:
- Engine: Pure functions over immutable values (dto), no database access
- Repository: CatalogRepository interface with SQL and in-memory backends
- Services: Stateless functions using session_scope() for transactions
- Exceptions: Consistent error handling via the ServiceError hierarchy

Engine Modules:
- unit_converter: Canonical mass conversion and display formatting
- costing_service: Price lookup, recipe cost, pricing policy
- recipe_scaling_service: Batch scaling of a costed recipe
- indent_service: Multi-recipe ingredient demand (the indent)

Service Modules:
- repository: Master ingredient and recipe storage
- order_service: Customer orders
- recipe_pricing_service: Customer price list
- stock_register_service: Monthly stock register
- ingredient_import_service: Bulk master ingredient import/export

Infrastructure:
- database: Engine and session management
- exceptions: Custom exception classes
- logging_utils: Structured service logging
"""
