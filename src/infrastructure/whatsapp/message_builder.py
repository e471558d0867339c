"""承运方消息请求体构造

流程节点发送的非模板消息：文本、媒体、回复按钮、列表。
模板消息由 domain/services/template_contract.build_template_payload() 构造。
"""

from typing import Any

from src.domain.services.phone import to_carrier_recipient

MAX_REPLY_BUTTONS = 3


def _envelope(to: str, message_type: str, content: dict[str, Any]) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": to_carrier_recipient(to),
        "type": message_type,
        message_type: content,
    }


def build_text_message(to: str, body: str) -> dict[str, Any]:
    return _envelope(to, "text", {"body": body, "preview_url": False})


def build_media_message(
    to: str,
    media_type: str,
    reference: str,
    caption: str | None = None,
    filename: str | None = None,
) -> dict[str, Any]:
    """媒体消息：reference 是 URL 时用 link，否则当作已上传的媒体 ID"""
    media: dict[str, Any] = (
        {"link": reference} if reference.startswith(("http://", "https://")) else {"id": reference}
    )
    # 承运方不接受音频说明文字
    if caption and media_type != "audio":
        media["caption"] = caption
    if filename and media_type == "document":
        media["filename"] = filename
    return _envelope(to, media_type, media)


def _interactive_frame(
    body: str, header: str | None, footer: str | None, kind: str, action: dict[str, Any]
) -> dict[str, Any]:
    interactive: dict[str, Any] = {"type": kind, "body": {"text": body}, "action": action}
    if header:
        interactive["header"] = {"type": "text", "text": header}
    if footer:
        interactive["footer"] = {"text": footer}
    return interactive


def build_reply_buttons_message(
    to: str,
    body: str,
    buttons: list[tuple[str, str]],
    header: str | None = None,
    footer: str | None = None,
) -> dict[str, Any]:
    """回复按钮消息（buttons 为 (id, title) 列表，最多 3 个）"""
    action = {
        "buttons": [
            {"type": "reply", "reply": {"id": button_id, "title": title}}
            for button_id, title in buttons[:MAX_REPLY_BUTTONS]
        ]
    }
    return _envelope(to, "interactive", _interactive_frame(body, header, footer, "button", action))


def build_list_message(
    to: str,
    body: str,
    button_text: str,
    sections: list[dict[str, Any]],
    header: str | None = None,
    footer: str | None = None,
) -> dict[str, Any]:
    """列表消息（sections 为 [{title?, rows: [{id, title, description?}]}]）"""
    normalized = []
    for section in sections:
        rows = []
        for row in section.get("rows") or []:
            item = {"id": row.get("id"), "title": row.get("title") or ""}
            if row.get("description"):
                item["description"] = row["description"]
            rows.append(item)
        entry: dict[str, Any] = {"rows": rows}
        if section.get("title"):
            entry["title"] = section["title"]
        normalized.append(entry)

    action = {"button": button_text, "sections": normalized}
    return _envelope(to, "interactive", _interactive_frame(body, header, footer, "list", action))
