from luastack.types.category import Category

# ----------------- ANSI colors -----------------
RESET = "\033[0m"
COLOR_NIL = "\033[90m"
COLOR_BOOLEAN = "\033[93m"
COLOR_NUMBER = "\033[94m"
COLOR_STRING = "\033[92m"
COLOR_TABLE = "\033[96m"
COLOR_FUNCTION = "\033[95m"
COLOR_USERDATA = "\033[91m"

CATEGORY_COLORS = {
    Category.NIL: COLOR_NIL,
    Category.BOOLEAN: COLOR_BOOLEAN,
    Category.NUMBER: COLOR_NUMBER,
    Category.STRING: COLOR_STRING,
    Category.TABLE: COLOR_TABLE,
    Category.FUNCTION: COLOR_FUNCTION,
    Category.USERDATA: COLOR_USERDATA,
}

# ----------------- Defaults -----------------
DEFAULT_OPTIONS = {
    "color": False,
    "max_string": 40,
    "show_absolute": True,
}


def describe_slot(L, idx: int, options: dict = DEFAULT_OPTIONS) -> str:
    category = Category(L.type(idx))
    if category is Category.NIL:
        text = "nil"
    elif category is Category.BOOLEAN:
        text = "true" if L.to_boolean(idx) else "false"
    elif category is Category.NUMBER:
        text = str(L.to_integer(idx)) if L.is_integer(idx) else repr(L.to_number(idx))
    elif category is Category.STRING:
        raw = L.to_lstring(idx)
        limit = options.get("max_string", 40)
        text = repr(raw[:limit]) + ("..." if len(raw) > limit else "")
    else:
        text = category.label
    if options.get("color", False):
        return f"{CATEGORY_COLORS.get(category, '')}{text}{RESET}"
    return text


def dump_stack(L, options: dict = DEFAULT_OPTIONS) -> str:
    """One line per slot, top first: ``[-1 | 3] number 42``."""
    top = L.get_top()
    if top == 0:
        return "<empty stack>"
    lines = []
    for i in range(top, 0, -1):
        rel = i - top - 1
        label = Category(L.type(i)).label
        pos = f"[{rel} | {i}]" if options.get("show_absolute", True) else f"[{rel}]"
        lines.append(f"{pos} {label} {describe_slot(L, i, options)}")
    return "\n".join(lines)
