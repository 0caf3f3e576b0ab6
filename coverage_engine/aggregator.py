import logging
import re
import unicodedata
from typing import Callable, Iterable, Optional

from . import settings
from .engine import assess
from .schemas import AggregatedItem, PolicyConfig, SkuRecord

logger = logging.getLogger(__name__)

KeyFunc = Callable[[SkuRecord], str]
SeedFunc = Callable[[str, SkuRecord], dict]

_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, trimmed, single-spaced."""
    return _WHITESPACE.sub(" ", (text or "").strip().lower())


def _fold_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


# --- Grouping keys ---

def by_normalized_name(record: SkuRecord) -> str:
    return normalize(record.name)


def by_name_and_size(record: SkuRecord) -> str:
    return f"{normalize(record.name)}|{normalize(record.size or record.variant_key)}"


def derive_pillow_name(product_name: str) -> str:
    """
    Strips the "Travesseiro" prefix and the brand from a pillow product name
    and keeps the first two remaining words, e.g.
    "Travesseiro Altenburg Nasa Plus Alto" -> "Nasa Plus".
    Names that are not pillows come back unchanged.
    """
    if not (product_name or "").strip():
        return "Sem Nome"
    name = product_name.strip()
    prefix = settings.PILLOW_NAME_PREFIX
    brand = settings.PILLOW_BRAND_NAME

    if not name.lower().startswith(prefix.lower()):
        return product_name

    name = name[len(prefix):].strip()
    if name.lower().startswith(brand.lower()):
        if len(name) == len(brand) or name[len(brand)] == " ":
            name = name[len(brand):].strip()

    words = name.split()
    if not words:
        return product_name
    return " ".join(words[:2])


def by_pillow_name(record: SkuRecord) -> str:
    return normalize(derive_pillow_name(record.name))


# (item type, keywords that must all appear in the product name, product type hint)
LINHA_BRANCA_ITEM_TYPES = [
    ("Protetor de Colchão", ("protetor", "colchao"), "protetor de colchao"),
    ("Protetor de Travesseiro", ("protetor", "travesseiro"), "protetor de travesseiro"),
    ("Saia Box", ("saia", "box"), "saia box"),
]


def identify_item_type(product_name: str, product_type: str = "") -> str:
    name = _fold_accents(normalize(product_name))
    ptype = _fold_accents(normalize(product_type))

    for item_type, keywords, type_hint in LINHA_BRANCA_ITEM_TYPES:
        if all(word in name for word in keywords) or type_hint in ptype:
            return item_type

    # Looser match on the product type alone
    for item_type, keywords, _ in LINHA_BRANCA_ITEM_TYPES:
        if item_type == "Saia Box":
            if "saia" in ptype:
                return item_type
        elif all(word in ptype for word in keywords):
            return item_type
    return "Outros"


def by_item_type_and_size(record: SkuRecord) -> str:
    item_type = identify_item_type(record.name, record.product_type)
    size = record.size or settings.DEFAULT_SIZE_LABEL
    return f"{normalize(item_type)}|{normalize(size)}"


# --- Seeds: display fields for a new group ---

def default_seed(key: str, first: SkuRecord) -> dict:
    return {"display_name": first.name or key, "labels": {}}


def pillow_seed(key: str, first: SkuRecord) -> dict:
    return {"display_name": derive_pillow_name(first.name), "labels": {}}


def linha_branca_seed(key: str, first: SkuRecord) -> dict:
    item_type = identify_item_type(first.name, first.product_type)
    size = first.size or settings.DEFAULT_SIZE_LABEL
    return {
        "display_name": f"{item_type} {size}",
        "labels": {"item_type": item_type, "size": size},
    }


def _average_known_price(records: list[SkuRecord]) -> Optional[float]:
    prices = [r.price for r in records if r.price is not None]
    if not prices:
        return None
    return sum(prices) / len(prices)


def aggregate(
    records: Iterable[SkuRecord],
    key_func: KeyFunc,
    policy: PolicyConfig,
    seed: Optional[SeedFunc] = None,
) -> list[AggregatedItem]:
    """
    Groups SKU records by `key_func` and analyses each group as one item.

    Quantities are summed and every metric is recomputed from the sums; the
    contributing records are kept on the aggregate. Each input record lands in
    exactly one group. Groups come back in the order their key first appeared.
    """
    seed = seed or default_seed
    groups: dict[str, list[SkuRecord]] = {}
    for record in records:
        groups.setdefault(key_func(record), []).append(record)

    items = []
    for key, members in groups.items():
        described = seed(key, members[0])
        coverage_stock = sum(r.coverage_stock(policy.stock_basis) for r in members)
        total_sales = sum(r.sales30d for r in members)
        total_open = sum(r.open_orders for r in members)

        items.append(
            AggregatedItem(
                group_key=key,
                display_name=described.get("display_name", key),
                labels=described.get("labels", {}),
                total_stock=sum(r.stock_total for r in members),
                total_ready_to_ship=sum(r.stock_ready_to_ship for r in members),
                total_regulator=sum(r.stock_regulator for r in members),
                total_sales30d=total_sales,
                total_open_orders=total_open,
                avg_price=_average_known_price(members),
                skus=list(members),
                **assess(coverage_stock, total_sales, total_open, policy),
            )
        )

    logger.debug(f"Aggregated {sum(len(m) for m in groups.values())} SKUs into {len(items)} items.")
    return items
