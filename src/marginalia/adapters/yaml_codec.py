import re, io
import yaml
from typing import Any
from ..core.ports import FrontmatterCodec

_FM = re.compile(r"^\s*---\s*\n(.*?)\n---\s*\n?", re.DOTALL)


class YamlFrontmatter(FrontmatterCodec):
    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        try:
            fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        except yaml.YAMLError:
            return {}, text
        if not isinstance(fm, dict):
            return {}, text
        body = text[m.end() :]
        return (fm, body)


def decode_value(raw: str | None) -> Any:
    """
    Decode a drawer value written as a YAML scalar or flow sequence.

    `[start, scroll]` -> ["start", "scroll"], `0.3` -> 0.3, `true` -> True.
    Text that is not valid YAML comes back unchanged.
    """
    if raw is None:
        return None
    try:
        return yaml.safe_load(io.StringIO(raw))
    except yaml.YAMLError:
        return raw
