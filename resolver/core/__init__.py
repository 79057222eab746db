"""
Core module of the turn-based combat resolver.

Holds the rule constants, the configuration tables, the per-call execution
log, the error hierarchy and the console helpers used by the demo.
"""

from .constants import (
    BASIC_ATTACK_COMMAND_ID,
    BASIC_ATTACK_COMMAND_NAME,
    STUNNED_COMMAND_ID,
    ITEM_HEAL_SHIELD_ACTOR_ID,
    ITEM_SP_GAIN_ACTOR_ID,
    STUN_STATUS_NAME,
    UnitType,
    UnitRole,
    EnemyTier,
    UnitStatus,
    BattleStateTag,
    CommandType,
    TriggerPhase,
    SelectionShape,
    AreaShape,
    AreaOrigin,
    Direction,
    EffectTarget,
    StatBasis,
    ItemKind,
)

from .logging import (
    ExecutionLog,
    setup_logging,
    get_logger,
    log_debug,
)

from .error_handling import (
    ResolverError,
    InputError,
    InsufficientResourceError,
    InvalidActionError,
    resolution_boundary,
    build_error_document,
)

from .config import (
    WeightedTable,
    ItemDefinition,
    StatGrowth,
    RewardDefinition,
    ResolverConfig,
    DEFAULT_CONFIG,
    load_config,
)

from .utils import (
    cprint,
    crule,
    make_bar,
)
