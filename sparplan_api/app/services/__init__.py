"""
Service layer.

Services contain the business rules and talk to the SQLite database.
Endpoints stay thin: they translate HTTP input into service calls and
let ``core.errors`` turn raised exceptions into responses.
"""
