CONTRACT_VERSION = "1.0.0"

COMMAND_INTENTS = (
    "start_quest",
    "advance_dialogue",
    "complete_quest",
    "fail_quest",
    "add_item",
    "remove_item",
    "update_stats",
    "spawn_enemy",
    "damage_enemy",
    "clear_reward",
    "advance_time",
    "start_spawning",
    "stop_spawning",
    "report_player_position",
)

QUERY_INTENTS = (
    "player_stats",
    "inventory",
    "quest_log",
    "enemies",
    "current_reward",
    "current_dialogue",
)

CONTRACT_DTO_TYPES = (
    "PlayerStatsView",
    "InventoryItemView",
    "QuestLogView",
    "DialogueView",
    "EnemyView",
    "RewardView",
)
