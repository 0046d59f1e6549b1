import json
import logging

from proxa import DELETED, PropertyNotWatched, dumps, off, wrap

# Raise the level to DEBUG to see node creation and dispatch logs.
logging.basicConfig(level=logging.WARNING)

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Wrapping plain data")
print("-" * 100)
print()


def log_change(node, prop, value, path):
    shown = "<deleted>" if value is DELETED else repr(value)
    print(f"  {path} changed -> {shown}")


# Any dict or list can be wrapped. The callback fires for changes anywhere inside it.
settings = wrap({"theme": "light", "editor": {"tabs": 4, "rulers": [80]}}, log_change)

settings["theme"] = "dark"
settings.editor.tabs = 2  # Attribute access works for dict keys
settings.editor.rulers.append(100)  # Deep changes report the full path
settings["theme"] = "dark"  # Same value: nothing is printed

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Watching a single property")
print("-" * 100)
print()


def on_tabs(node, prop, value, path):
    print(f"  editor.tabs is now {value}")


# Wrapping an existing node adds a callback to the same node.
wrap(settings.editor, on_tabs, "tabs")

settings.editor.tabs = 8  # Fires on_tabs and log_change
settings.editor.rulers[0] = 72  # Only log_change

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Removing observers")
print("-" * 100)
print()

off(settings.editor, on_tabs, "tabs")
settings.editor.tabs = 3  # on_tabs no longer fires

try:
    off(settings, log_change, "theme")
except PropertyNotWatched as e:
    print(f"  {e}")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Serializing")
print("-" * 100)
print()

print(" ", dumps(settings))
print(" ", json.dumps(settings.to_json(), indent=2))
