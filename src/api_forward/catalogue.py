"""Public listing of configured endpoints and the LLM prompt built from it."""

from api_forward.models.endpoints import DEFAULT_GROUP, EndpointDefinition, Snapshot

DRAWING_GROUP = "AI绘图"

GROUP_ORDER = {
    DRAWING_GROUP: 1,
    "二次元图片": 2,
    "三次元图片": 3,
    "表情包": 4,
    DEFAULT_GROUP: 99,
}

PROMPT_TEMPLATE = """    picture_url: |
    {{{{ 
    根据用户请求，选择合适的图片API路径，生成并返回完整URL。仅输出最终URL。
    基础URL：{base_url}
    可用路径：
{paths}
    }}}}"""


def _group_of(endpoint: EndpointDefinition) -> str:
    return endpoint.group or DEFAULT_GROUP


def build_llm_prompt(snapshot: Snapshot, base_url: str) -> str:
    """List every endpoint path, drawing endpoints with their tags placeholder."""
    endpoints = sorted(
        snapshot.endpoints.values(),
        key=lambda ep: (GROUP_ORDER.get(_group_of(ep), 50), ep.key),
    )
    lines = []
    for ep in endpoints:
        desc = ep.description or _group_of(ep)
        path = f"/{ep.key}?tags=<tags>" if ep.group == DRAWING_GROUP else f"/{ep.key}"
        lines.append(f"    - {desc}:{path}")
    return PROMPT_TEMPLATE.format(base_url=base_url, paths="\n".join(lines))


def build_groups(snapshot: Snapshot, base_url: str) -> list[dict]:
    """Endpoints grouped for display, groups by rank and endpoints by key."""
    grouped: dict[str, list[EndpointDefinition]] = {}
    for ep in snapshot.endpoints.values():
        grouped.setdefault(_group_of(ep), []).append(ep)

    groups = []
    for name in sorted(grouped, key=lambda g: GROUP_ORDER.get(g, 99)):
        groups.append(
            {
                "name": name,
                "endpoints": [
                    {
                        "key": ep.key,
                        "description": ep.description or ep.key,
                        "type": ep.type,
                        "url": f"{base_url}/{ep.key}",
                    }
                    for ep in sorted(grouped[name], key=lambda ep: ep.key)
                ],
            }
        )
    return groups
