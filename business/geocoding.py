"""地理编码（Nominatim）与坐标工具

按从精确到宽泛的顺序依次查询：
    地址+城市+省份 → 城市+省份 → 城市 → 省份
第一个有结果的查询胜出；全部失败时使用本地静态表兜底
（洪都拉斯按省份中心点，其余按国家中心点）。

不做缓存，也不做链路之外的重试。
"""
import math
from typing import Dict, List, Optional, Tuple, Union

import httpx
from loguru import logger

from config.locations import (
    get_country_config,
    get_location_fallback,
    normalize_country_code,
)
from config.settings import settings

__all__ = [
    "Geocoder",
    "get_location_fallback",
    "normalize_country_code",
    "has_valid_coordinates",
    "haversine_km",
    "format_distance",
]

EARTH_RADIUS_KM = 6371.0


class Geocoder:
    """Nominatim 地理编码客户端

    Args:
        base_url: Nominatim 服务地址
        user_agent: 请求头 User-Agent（Nominatim 使用政策要求）
        timeout: 单次请求超时（秒）
        client: 可注入的 httpx.Client（测试时使用 MockTransport）
    """

    def __init__(self, base_url: Optional[str] = None,
                 user_agent: Optional[str] = None,
                 timeout: Optional[float] = None,
                 client: Optional[httpx.Client] = None):
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoding_timeout
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None

    def geocode(self, query: str) -> Optional[Tuple[float, float]]:
        """查询单个地址，返回 (lat, lng)，无结果或出错时返回 None"""
        params = {"q": query, "format": "json", "limit": 1}
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        try:
            resp = self._get_client().get(
                f"{self.base_url}/search", params=params, headers=headers,
                timeout=self.timeout,
            )
            if resp.status_code >= 400:
                logger.warning(f"Nominatim 返回错误 {resp.status_code}: {resp.text[:200]}")
                return None
            results = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"地理编码请求失败 [{query}]: {e}")
            return None

        if not isinstance(results, list) or not results:
            return None
        try:
            lat = float(results[0]["lat"])
            lng = float(results[0]["lon"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"地理编码结果格式异常 [{query}]: {e}")
            return None
        return (lat, lng) if has_valid_coordinates(lat, lng) else None

    @staticmethod
    def build_queries(city: Optional[str], department: Optional[str],
                      country: Optional[str],
                      address: Optional[str] = None) -> List[str]:
        """按精确度从高到低构造查询串（跳过空字段，去重）"""
        country_name = get_country_config(normalize_country_code(country))["name"]
        city = (city or "").strip()
        department = (department or "").strip()
        address = (address or "").strip()

        candidates = [
            [address, city, department] if address and (city or department) else [],
            [city, department] if city and department else [],
            [city],
            [department],
        ]
        queries = []
        for parts in candidates:
            parts = [p for p in parts if p]
            if not parts:
                continue
            query = ", ".join(parts + [country_name])
            if query not in queries:
                queries.append(query)
        return queries

    def resolve(self, city: Optional[str], department: Optional[str],
                country: Optional[str],
                address: Optional[str] = None) -> Dict[str, Union[float, str]]:
        """解析坐标，永远返回 {"lat", "lng", "source"}"""
        for query in self.build_queries(city, department, country, address):
            point = self.geocode(query)
            if point:
                logger.debug(f"地理编码命中: {query} -> {point}")
                return {"lat": point[0], "lng": point[1], "source": "nominatim"}

        fallback = get_location_fallback(city, department, country)
        logger.info(f"地理编码无结果，使用兜底坐标: {city}, {department}, {country}")
        return {**fallback, "source": "fallback"}


def has_valid_coordinates(lat, lng) -> bool:
    """坐标非空、有限、在合法范围内，且不是 (0, 0)"""
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    if lat == 0 and lng == 0:
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """两点间球面距离（公里）"""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
         * math.sin(d_lng / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def format_distance(km: float) -> str:
    """< 1 km 显示米（"850 m"），否则保留一位小数（"2.4 km"）"""
    if km < 1:
        return f"{math.floor(km * 1000 + 0.5)} m"
    return f"{km:.1f} km"
