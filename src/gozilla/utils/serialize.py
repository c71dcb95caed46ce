from typing import Any


def recursive_merge(*dictionaries: dict | None) -> dict:
    """Merge dictionaries left to right; nested dicts are merged, everything else is replaced."""
    result: dict[str, Any] = {}
    for d in dictionaries:
        if not d:
            continue
        for key, value in d.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key] = recursive_merge(result[key], value)
            else:
                result[key] = value
    return result
