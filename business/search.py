"""搜索与筛选工具

- normalize_text：去重音 + 小写
- matches_search：按空白切词，所有词都必须出现（AND 匹配）
- find_suggestion：在分类标签中找最接近的词（"¿Quisiste decir...?"）
- filter_businesses / sort_by_distance：商家列表的内存筛选与按距离排序
"""
import unicodedata
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from business.geocoding import has_valid_coordinates, haversine_km
from config.locations import DEFAULT_COUNTRY
from config.taxonomy import (
    TAXONOMY, get_category_by_id, get_group, label_for, normalize_specialty,
)

NEW_BUSINESS_DAYS = 30


def normalize_text(text: Optional[str]) -> str:
    """NFD 分解后去掉组合音标，再转小写"""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text))
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower()


def searchable_text(business: Dict[str, Any]) -> str:
    """拼接商家可被搜索的文本：名称、分类（含标签）、专长、描述"""
    parts: List[str] = [
        business.get("business_name") or "",
        business.get("subcategory") or "",
        business.get("description") or "",
    ]
    for category_id in [business.get("category")] + list(business.get("subcategories") or []):
        if not category_id:
            continue
        parts.append(category_id)
        node = get_group(category_id) or get_category_by_id(category_id)
        if node:
            parts.extend(node["label"].values())
    parts.extend(business.get("specialties") or [])
    parts.extend(business.get("tags") or [])
    return " ".join(str(p) for p in parts if p)


def matches_search(target: Union[str, Dict[str, Any]], term: Optional[str]) -> bool:
    """空搜索词匹配所有；否则每个词都要出现在目标文本中"""
    tokens = normalize_text(term).split()
    if not tokens:
        return True
    text = target if isinstance(target, str) else searchable_text(target)
    normalized = normalize_text(text)
    return all(token in normalized for token in tokens)


def levenshtein(a: str, b: str) -> int:
    """编辑距离"""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def _suggestion_candidates() -> Iterable[str]:
    seen = set()
    for group in TAXONOMY.values():
        labels = [group["label"].get("es"), group["label"].get("en")]
        for sub in group["subcategories"]:
            labels += [sub["label"].get("es"), sub["label"].get("en")]
            for specialty in sub["specialties"]:
                labels += list(normalize_specialty(specialty).values())
        for label in labels:
            if label and label not in seen:
                seen.add(label)
                yield label


def find_suggestion(term: Optional[str]) -> Optional[str]:
    """在分类标签中找编辑距离最小且在阈值内的候选词

    阈值：min(3, len(候选) // 3 + 1)；长度差超过 3 的候选直接跳过。
    """
    normalized = normalize_text(term).strip()
    if len(normalized) < 3:
        return None

    best, best_distance = None, None
    for candidate in _suggestion_candidates():
        normalized_candidate = normalize_text(candidate)
        if abs(len(normalized_candidate) - len(normalized)) > 3:
            continue
        distance = levenshtein(normalized, normalized_candidate)
        threshold = min(3, len(normalized_candidate) // 3 + 1)
        if distance <= threshold and (best_distance is None or distance < best_distance):
            best, best_distance = candidate, distance
    return best


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def filter_businesses(businesses: List[Dict[str, Any]], term: Optional[str] = None,
                      country_code: Optional[str] = None,
                      status_filter: Optional[str] = None,
                      now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """按国家、搜索词和附加条件筛选商家

    Args:
        country_code: 商家缺少国家代码时视为默认国家
        status_filter: "new"（30 天内创建）或 "withSchedule"（设置了营业时间）
    """
    now = _as_datetime(now) or datetime.now(timezone.utc)
    results = []
    for business in businesses:
        if country_code and (business.get("country_code") or DEFAULT_COUNTRY) != country_code:
            continue
        if not matches_search(business, term):
            continue
        if status_filter == "new":
            created = _as_datetime(business.get("created_at"))
            if created is None or now - created > timedelta(days=NEW_BUSINESS_DAYS):
                continue
        elif status_filter == "withSchedule":
            if not business.get("opening_hours"):
                continue
        results.append(business)
    return results


def sort_by_distance(businesses: List[Dict[str, Any]], lat: float,
                     lng: float) -> List[Dict[str, Any]]:
    """附加 distance_km 并按距离升序排序，无有效坐标的排在最后"""
    with_distance = []
    for business in businesses:
        location = business.get("location") or {}
        b_lat = location.get("lat", business.get("lat"))
        b_lng = location.get("lng", business.get("lng"))
        item = dict(business)
        if has_valid_coordinates(b_lat, b_lng):
            item["distance_km"] = haversine_km(lat, lng, float(b_lat), float(b_lng))
        else:
            item["distance_km"] = None
        with_distance.append(item)
    return sorted(
        with_distance,
        key=lambda b: (b["distance_km"] is None, b["distance_km"] or 0.0),
    )


def category_label(category_id: Optional[str], locale: str = "es") -> str:
    """分类 ID 转显示标签，未知 ID 原样返回"""
    if not category_id:
        return ""
    node = get_group(category_id) or get_category_by_id(category_id)
    return label_for(node["label"], locale) if node else category_id
