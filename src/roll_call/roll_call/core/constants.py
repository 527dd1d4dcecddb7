"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DRAFT_STORAGE_KEY = "chamada_rascunho"
QUEUE_STORAGE_KEY = "chamadas_pendentes"
ROSTER_STORAGE_KEY = "dados_offline"

DEFAULT_AUTOSAVE_DELAY_SECONDS = 1.0
DEFAULT_SYNC_INTERVAL_SECONDS = 3.0
DEFAULT_HISTORY_LIMIT = 30
RECENT_OUTCOMES_LIMIT = 20
