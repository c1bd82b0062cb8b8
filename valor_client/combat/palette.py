"""Colors, icons and screen positions used by combat feedback."""
from typing import Dict

from valor_client.models.visual import Side

DAMAGE_TAKEN_COLOR = "#ff4444"
ENEMY_HIT_COLOR = "#ffffff"
CRIT_COLOR = "#ffdd00"
HEAL_COLOR = "#44ff88"

DEFAULT_ELEMENT = "Fire"

ELEMENT_COLORS: Dict[str, str] = {
    "Fire": "#ff4400",
    "Water": "#0088ff",
    "Air": "#88ddff",
    "Earth": "#aa7722",
    "Nature": "#22cc44",
    "Light": "#ffee88",
    "Dark": "#8833aa",
    "Plasma": "#ff44aa",
    "Space": "#6666ff",
    "Time": "#ddaa33",
    "Aether": "#7799ff",
    "Soul": "#cc88ff",
    "Void": "#555566",
    "Storm": "#ffdd00",
    "Metal": "#99aabb",
    "Blood": "#cc2222",
    "Crystal": "#88eeff",
    "Arcane": "#aa44ff",
}

STATUS_ICONS: Dict[str, str] = {
    "stun": "💫",
    "freeze": "🧊",
    "silence": "🤐",
    "burn": "🔥",
    "poison": "☠️",
    "bleed": "🩸",
    "weakness": "⬇️",
    "buff_str": "⬆️",
    "buff_def": "🛡️",
    "buff_spd": "💨",
    "buff_int": "🧠",
}

ACTION_LABELS: Dict[str, str] = {
    "attack": "⚔️  Attack - Strike with STR",
    "defend": "🛡️  Defend - Guard with DEF",
    "dodge": "💨 Dodge - Evade with SPD",
    "spell": "✨ Spell - Cast with INT",
}

# 屏幕百分比坐标
FLOAT_BASE_X: Dict[Side, float] = {Side.PLAYER: 22.0, Side.ENEMY: 72.0}
FLOAT_BASE_Y = 30.0
FLOAT_JITTER = 10.0
SPARK_X: Dict[Side, float] = {Side.PLAYER: 25.0, Side.ENEMY: 75.0}
SPARK_Y = 40.0


def element_color(element: str) -> str:
    return ELEMENT_COLORS.get(element, ELEMENT_COLORS[DEFAULT_ELEMENT])


def hp_band(percent: float) -> str:
    """HP bar band: high above 60%, mid above 25%, low otherwise."""
    if percent > 60:
        return "high"
    if percent > 25:
        return "mid"
    return "low"
