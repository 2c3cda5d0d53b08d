"""
Delivery pattern recommendation engine.

Responsibilities:
- Summarise a customer's order history into a delivery pattern.
- Run rule modules (time, location, driver, price, route) against it.
- Rank the resulting suggestions by confidence for API serialisation.
"""
