"""Pure coupon and certificate rules.

Nothing in this package touches the database, the HTTP layer or the wall
clock. Callers load snapshots through repositories, pass an explicit ``now``
and persist whatever comes back.
"""
