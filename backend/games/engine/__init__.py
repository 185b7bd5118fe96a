"""Game rules with no database, HTTP or channel access.

Randomness is passed in as an rng argument so results can be reproduced.
"""
