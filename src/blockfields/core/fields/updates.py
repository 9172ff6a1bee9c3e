# どこで: `src/blockfields/core/fields/updates.py`。
# 何を: ウィジェット入力を attribute の保存値へ変換する純粋関数群を提供する。
# なぜ: 型ごとの更新規約（数値は文字列で保存、日付は日付部分のみ等）を GUI 依存部と切り離して検証するため。

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

DEFAULT_COLOR = "#ffffff"

ALIGNMENT_TOKENS: tuple[tuple[str, ...], ...] = (
    ("top left", "top center", "top right"),
    ("center left", "center center", "center right"),
    ("bottom left", "bottom center", "bottom right"),
)

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True, slots=True)
class Option:
    """選択肢 1 件（保存される識別子と表示ラベル）。"""

    value: str
    label: str


@dataclass(frozen=True, slots=True)
class OptionGroup:
    """サブ選択肢を束ねる見出し付きグループ。"""

    label: str
    options: tuple[Option, ...]


def text_update(value: Any) -> str:
    """text/textarea の保存値を返す（そのまま文字列化）。"""

    return "" if value is None else str(value)


def number_update(value: Any) -> str:
    """number の保存値を返す。

    attribute のシリアライズを経ても型が変わらないよう、常に文字列で保存する。
    整数値の float は小数点なしで表す。
    """

    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return "" if value is None else str(value)


def date_update(value: Any) -> str:
    """date の保存値（日付部分のみ）を返す。"""

    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        value = value.isoformat()
    text = str(value).strip()
    return text.split("T", 1)[0].split(" ", 1)[0]


def toggle_update(value: Any) -> bool:
    """toggle の保存値を返す。"""

    return bool(value)


def ids_from_options(selection: Sequence[Any] | None) -> list[str]:
    """リッチな選択オブジェクト列から識別子だけの list を返す。

    Option でも `{"value": ..., "label": ...}` の dict でも受け付ける。
    空/None の場合は空 list。
    """

    if not selection:
        return []
    out: list[str] = []
    for option in selection:
        if isinstance(option, Option):
            out.append(option.value)
        elif isinstance(option, Mapping):
            out.append(str(option.get("value")))
        else:
            out.append(str(getattr(option, "value", option)))
    return out


def options_from_ids(ids: Sequence[Any] | None, available: Sequence[Option]) -> list[Option]:
    """保存済みの識別子列を、利用可能な選択肢と突き合わせて Option 列に戻す。

    利用可能な選択肢に無い識別子は、識別子そのものをラベルにして保持する。
    """

    if not ids:
        return []
    by_value = {o.value: o for o in available}
    return [by_value.get(str(i), Option(value=str(i), label=str(i))) for i in ids]


def move_item(items: Sequence[Any], index: int, offset: int) -> list[Any]:
    """items[index] を offset だけ移動した新しい list を返す。範囲外なら変更なし。"""

    out = list(items)
    target = index + offset
    if not (0 <= index < len(out)) or not (0 <= target < len(out)):
        return out
    out[index], out[target] = out[target], out[index]
    return out


def select_options(choices: Mapping[str, Any]) -> tuple[list[Option | OptionGroup], bool]:
    """select の choices から選択肢列を作り、(options, grouped) を返す。

    choices の値が `{"label": ..., "subchoices": {...}}` の場合はグループになる。
    1 つでもグループがあれば grouped=True。
    """

    grouped = False
    options: list[Option | OptionGroup] = []
    for key, choice in choices.items():
        if isinstance(choice, Mapping) and choice.get("subchoices"):
            grouped = True
            subchoices = choice["subchoices"]
            sub = tuple(Option(value=str(k), label=str(v)) for k, v in subchoices.items())
            options.append(OptionGroup(label=str(choice.get("label", key)), options=sub))
        else:
            options.append(Option(value=str(key), label=str(choice)))
    return options, grouped


def flatten_options(options: Sequence[Option | OptionGroup]) -> list[Option]:
    """グループを展開した Option 列を返す。"""

    out: list[Option] = []
    for item in options:
        if isinstance(item, OptionGroup):
            out.extend(item.options)
        else:
            out.append(item)
    return out


def toggle_multi_value(current: Sequence[Any] | None, value: str) -> list[str]:
    """複数選択で value の選択状態を反転した list を返す（選択順は保持）。"""

    out = [str(v) for v in (current or ())]
    if value in out:
        out.remove(value)
    else:
        out.append(value)
    return out


def snap_to_step(
    value: float,
    *,
    min_value: float | None = None,
    max_value: float | None = None,
    step: float | None = None,
) -> float:
    """value を [min, max] に収め、min（無ければ 0）起点の step 刻みへ丸めて返す。"""

    out = float(value)
    if step is not None and float(step) > 0:
        base = 0.0 if min_value is None else float(min_value)
        n = round((out - base) / float(step))
        out = base + n * float(step)
        # 刻みの浮動小数誤差を step の桁数で落とす
        decimals = _decimals(float(step))
        out = round(out, decimals)
    if min_value is not None:
        out = max(float(min_value), out)
    if max_value is not None:
        out = min(float(max_value), out)
    return out


def _decimals(step: float) -> int:
    text = repr(step)
    if "e-" in text:
        return int(text.split("e-", 1)[1])
    if "." not in text:
        return 0
    return len(text.split(".", 1)[1].rstrip("0"))


def range_update(value: Any, args: Mapping[str, Any]) -> int | float:
    """range の保存値を返す。min/max/step が全て整数なら int で返す。"""

    min_value = as_optional_float(args.get("min"))
    max_value = as_optional_float(args.get("max"))
    step = as_optional_float(args.get("step"))
    out = snap_to_step(float(value), min_value=min_value, max_value=max_value, step=step)
    if range_is_integral(args):
        return int(round(out))
    return out


def range_is_integral(args: Mapping[str, Any]) -> bool:
    """min/max/step の全てが整数（未指定・不正値は未指定扱い）なら True。"""

    for key in ("min", "max", "step"):
        f = as_optional_float(args.get(key))
        if f is not None and not f.is_integer():
            return False
    return True


def as_optional_float(value: Any) -> float | None:
    """数値として読めれば float を、空/不正/非有限なら None を返す。"""

    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def normalize_hex_color(value: Any) -> str:
    """色の表示値を `#rrggbb` で返す。未設定/不正値は既定色。"""

    if not value:
        return DEFAULT_COLOR
    m = _HEX_COLOR_RE.match(str(value).strip())
    if m is None:
        return DEFAULT_COLOR
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits.lower()}"


def rgb01_from_hex(value: Any) -> tuple[float, float, float]:
    """hex 文字列を 0..1 の RGB に変換して返す。"""

    digits = normalize_hex_color(value)[1:]
    r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    return r / 255.0, g / 255.0, b / 255.0


def hex_from_rgb01(rgb: Sequence[float]) -> str:
    """0..1 の RGB を `#rrggbb` に変換して返す。"""

    r, g, b = rgb
    out: list[int] = []
    for v in (r, g, b):
        iv = int(round(float(v) * 255.0))
        out.append(max(0, min(255, iv)))
    return "#{:02x}{:02x}{:02x}".format(*out)


def image_update(text: str, *, gallery: bool) -> int | list[int]:
    """image の入力文字列を保存値へ変換して返す。

    gallery の場合はカンマ区切りの ID 列を list[int] に、単体の場合は int にする。
    数字として読めない要素は捨てる。
    """

    ids: list[int] = []
    for part in str(text).replace(" ", "").split(","):
        if part.isdigit():
            ids.append(int(part))
    if gallery:
        return ids
    return ids[0] if ids else 0


def image_text(value: Any) -> str:
    """image の保存値を入力欄用の文字列にして返す。"""

    if not value:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


__all__ = [
    "ALIGNMENT_TOKENS",
    "as_optional_float",
    "DEFAULT_COLOR",
    "Option",
    "OptionGroup",
    "date_update",
    "flatten_options",
    "hex_from_rgb01",
    "ids_from_options",
    "image_text",
    "image_update",
    "move_item",
    "normalize_hex_color",
    "number_update",
    "options_from_ids",
    "range_is_integral",
    "range_update",
    "rgb01_from_hex",
    "select_options",
    "snap_to_step",
    "text_update",
    "toggle_multi_value",
    "toggle_update",
]
