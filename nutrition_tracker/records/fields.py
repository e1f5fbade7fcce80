"""Field names of the meal database and the concepts they map to."""

PRIMARY_IMAGE_FIELD = "Foto"
MEAL_TIME_FIELD = "Hora comida"
USER_CONTEXT_FIELD = "Información adicional"

# Concept -> acceptable field names, in order of preference.
WRITEBACK_FIELDS: dict[str, tuple[str, ...]] = {
    "meal_time": (MEAL_TIME_FIELD,),
    "calories": ("Calories", "Calorias"),
    "categories": ("Elementos",),
    "analysis": ("Análisis alimentario",),
    "legacy_notes": ("Analysis Notes", "Notas"),
    "analyzed": ("Analyzed", "Analizado"),
}

# Fields owned by the pipeline; never rendered into the model context.
RESERVED_FIELDS: frozenset[str] = frozenset(
    {PRIMARY_IMAGE_FIELD, "Nutrients"}
    | {name for names in WRITEBACK_FIELDS.values() for name in names}
)

IMAGE_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp")
