from typing import Optional, Tuple


def locate_scene(json_text: str, scene_id: int) -> Optional[Tuple[int, int]]:
    """
    Span of the `"scene_id": <id>` line in pretty-printed analysis JSON.

    Returns (start, end) where end is the next newline after start (or the
    end of the text). Returns None when the marker is absent, e.g. after the
    text was minified or the scene was removed.
    """
    if not json_text:
        return None
    marker = f'"scene_id": {scene_id}'
    start = json_text.find(marker)
    while start != -1:
        after = start + len(marker)
        # "scene_id": 1 must not match "scene_id": 10 or 1.5
        if after < len(json_text) and (json_text[after].isdigit() or json_text[after] == "."):
            start = json_text.find(marker, after)
            continue
        end = json_text.find("\n", start)
        return start, (len(json_text) if end == -1 else end)
    return None
