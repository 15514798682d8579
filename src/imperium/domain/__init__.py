"""Empire simulation rules for Imperium.

Everything here runs in memory and holds no game-global state:

* Dataclasses describing empires and the results of each operation (see :mod:`models`).
* Enumerations, versioned constant tables and frozen rule configuration.
* Pure rule modules, one per subsystem: modifiers, ledger, buildings, bank,
  market, spells, combat, the turn scheduler, defeat, rounds and the draft.

Operations take an empire plus a request and return a result value holding a
new empire.  The caller's empire is never mutated.
"""

from . import (
    actions,
    bank,
    buildings,
    catalog,
    combat,
    defeat,
    draft,
    empire,
    enums,
    errors,
    ledger,
    market,
    models,
    modifiers,
    rounds,
    rules_config,
    spells,
    tables,
    turns,
)

__all__ = [
    "actions",
    "bank",
    "buildings",
    "catalog",
    "combat",
    "defeat",
    "draft",
    "empire",
    "enums",
    "errors",
    "ledger",
    "market",
    "models",
    "modifiers",
    "rounds",
    "rules_config",
    "spells",
    "tables",
    "turns",
]
