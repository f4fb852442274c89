"""国家与地区配置表

包含：
- COUNTRIES：支持的国家（货币、电话前缀、地区类型、地图中心点、一级行政区）
- HN_DEPARTMENT_CENTROIDS：洪都拉斯各省（departamento）中心坐标
- 国家代码归一化、坐标兜底查询

坐标兜底只依赖本地静态表，不发起任何网络请求。
"""
import unicodedata
from typing import Any, Dict, List, Optional

from config.settings import settings

DEFAULT_COUNTRY = settings.default_country.upper()


def _states(*names: str) -> List[Dict[str, Any]]:
    return [{"name": n} for n in names]


COUNTRIES: Dict[str, Dict[str, Any]] = {
    # 中美洲
    "HN": {
        "code": "HN", "name": "Honduras", "currency": "HNL", "phone_prefix": "+504",
        "region_type": "department", "region_label": "Departamento",
        "coordinates": {"lat": 14.0818, "lng": -87.2068, "zoom": 7},
        "main_city": "Tegucigalpa",
        "states": [
            {"name": "Atlántida", "cities": ["La Ceiba"]},
            {"name": "Choluteca", "cities": ["Choluteca"]},
            {"name": "Colón", "cities": ["Trujillo"]},
            {"name": "Comayagua", "cities": ["Comayagua"]},
            {"name": "Copán", "cities": ["Santa Rosa de Copán"]},
            {"name": "Cortés", "cities": ["San Pedro Sula"]},
            {"name": "El Paraíso", "cities": ["Yuscarán"]},
            {"name": "Francisco Morazán", "cities": ["Tegucigalpa"]},
            {"name": "Gracias a Dios", "cities": ["Puerto Lempira"]},
            {"name": "Intibucá", "cities": ["La Esperanza"]},
            {"name": "Islas de la Bahía", "cities": ["Roatán"]},
            {"name": "La Paz", "cities": ["La Paz"]},
            {"name": "Lempira", "cities": ["Gracias"]},
            {"name": "Ocotepeque", "cities": ["Ocotepeque"]},
            {"name": "Olancho", "cities": ["Juticalpa"]},
            {"name": "Santa Bárbara", "cities": ["Santa Bárbara"]},
            {"name": "Valle", "cities": ["Nacaome"]},
            {"name": "Yoro", "cities": ["Yoro"]},
        ],
    },
    "GT": {
        "code": "GT", "name": "Guatemala", "currency": "GTQ", "phone_prefix": "+502",
        "region_type": "department", "region_label": "Departamento",
        "coordinates": {"lat": 14.6349, "lng": -90.5069, "zoom": 7},
        "main_city": "Ciudad de Guatemala",
        "states": _states(
            "Alta Verapaz", "Baja Verapaz", "Chimaltenango", "Chiquimula",
            "El Progreso", "Escuintla", "Guatemala", "Huehuetenango", "Izabal",
            "Jalapa", "Jutiapa", "Petén", "Quetzaltenango", "Quiché",
            "Retalhuleu", "Sacatepéquez", "San Marcos", "Santa Rosa", "Sololá",
            "Suchitepéquez", "Totonicapán", "Zacapa",
        ),
    },
    "SV": {
        "code": "SV", "name": "El Salvador", "currency": "USD", "phone_prefix": "+503",
        "region_type": "department", "region_label": "Departamento",
        "coordinates": {"lat": 13.6929, "lng": -89.2182, "zoom": 8},
        "main_city": "San Salvador",
        "states": _states(
            "Ahuachapán", "Cabañas", "Chalatenango", "Cuscatlán", "La Libertad",
            "La Paz", "La Unión", "Morazán", "San Miguel", "San Salvador",
            "San Vicente", "Santa Ana", "Sonsonate", "Usulután",
        ),
    },
    "NI": {
        "code": "NI", "name": "Nicaragua", "currency": "NIO", "phone_prefix": "+505",
        "region_type": "department", "region_label": "Departamento",
        "coordinates": {"lat": 12.1150, "lng": -86.2362, "zoom": 7},
        "main_city": "Managua",
        "states": _states(
            "Boaco", "Carazo", "Chinandega", "Chontales", "Estelí", "Granada",
            "Jinotega", "León", "Madriz", "Managua", "Masaya", "Matagalpa",
            "Nueva Segovia", "Rivas", "Río San Juan",
            "Región Autónoma de la Costa Caribe Norte",
            "Región Autónoma de la Costa Caribe Sur",
        ),
    },
    "CR": {
        "code": "CR", "name": "Costa Rica", "currency": "CRC", "phone_prefix": "+506",
        "region_type": "province", "region_label": "Provincia",
        "coordinates": {"lat": 9.9281, "lng": -84.0907, "zoom": 7},
        "main_city": "San José",
        "states": _states(
            "San José", "Alajuela", "Cartago", "Heredia", "Guanacaste",
            "Puntarenas", "Limón",
        ),
    },
    "PA": {
        "code": "PA", "name": "Panamá", "currency": "PAB", "phone_prefix": "+507",
        "region_type": "province", "region_label": "Provincia",
        "coordinates": {"lat": 8.9824, "lng": -79.5199, "zoom": 7},
        "main_city": "Ciudad de Panamá",
        "states": _states(
            "Bocas del Toro", "Coclé", "Colón", "Chiriquí", "Darién", "Herrera",
            "Los Santos", "Panamá", "Veraguas", "Panamá Oeste",
        ),
    },
    # 北美（拉美）
    "MX": {
        "code": "MX", "name": "México", "currency": "MXN", "phone_prefix": "+52",
        "region_type": "state", "region_label": "Estado",
        "coordinates": {"lat": 19.4326, "lng": -99.1332, "zoom": 5},
        "main_city": "Ciudad de México",
        "states": _states(
            "Aguascalientes", "Baja California", "Baja California Sur",
            "Campeche", "Chiapas", "Chihuahua", "Ciudad de México", "Coahuila",
            "Colima", "Durango", "Guanajuato", "Guerrero", "Hidalgo", "Jalisco",
            "México", "Michoacán", "Morelos", "Nayarit", "Nuevo León", "Oaxaca",
            "Puebla", "Querétaro", "Quintana Roo", "San Luis Potosí", "Sinaloa",
            "Sonora", "Tabasco", "Tamaulipas", "Tlaxcala", "Veracruz", "Yucatán",
            "Zacatecas",
        ),
    },
    # 南美
    "CO": {
        "code": "CO", "name": "Colombia", "currency": "COP", "phone_prefix": "+57",
        "region_type": "department", "region_label": "Departamento",
        "coordinates": {"lat": 4.7110, "lng": -74.0721, "zoom": 6},
        "main_city": "Bogotá",
        "states": _states(
            "Amazonas", "Antioquia", "Arauca", "Atlántico", "Bolívar", "Boyacá",
            "Caldas", "Caquetá", "Casanare", "Cauca", "Cesar", "Chocó", "Córdoba",
            "Cundinamarca", "Guainía", "Guaviare", "Huila", "La Guajira",
            "Magdalena", "Meta", "Nariño", "Norte de Santander", "Putumayo",
            "Quindío", "Risaralda", "San Andrés y Providencia", "Santander",
            "Sucre", "Tolima", "Valle del Cauca", "Vaupés", "Vichada",
        ),
    },
    "VE": {
        "code": "VE", "name": "Venezuela", "currency": "VES", "phone_prefix": "+58",
        "region_type": "state", "region_label": "Estado",
        "coordinates": {"lat": 10.4806, "lng": -66.9036, "zoom": 6},
        "main_city": "Caracas",
        "states": _states(
            "Distrito Capital", "Zulia", "Miranda", "Carabobo", "Lara",
            "Aragua", "Anzoátegui", "Bolívar", "Táchira", "Falcón",
        ),
    },
    "EC": {
        "code": "EC", "name": "Ecuador", "currency": "USD", "phone_prefix": "+593",
        "region_type": "province", "region_label": "Provincia",
        "coordinates": {"lat": -0.1807, "lng": -78.4678, "zoom": 7},
        "main_city": "Quito",
        "states": _states(
            "Azuay", "Bolívar", "Cañar", "Carchi", "Chimborazo", "Cotopaxi",
            "El Oro", "Esmeraldas", "Galápagos", "Guayas", "Imbabura", "Loja",
            "Los Ríos", "Manabí", "Morona Santiago", "Napo", "Orellana",
            "Pastaza", "Pichincha", "Santa Elena", "Santo Domingo", "Sucumbíos",
            "Tungurahua", "Zamora Chinchipe",
        ),
    },
    "PE": {
        "code": "PE", "name": "Perú", "currency": "PEN", "phone_prefix": "+51",
        "region_type": "region", "region_label": "Región",
        "coordinates": {"lat": -12.0464, "lng": -77.0428, "zoom": 5},
        "main_city": "Lima",
        "states": _states(
            "Amazonas", "Áncash", "Apurímac", "Arequipa", "Ayacucho",
            "Cajamarca", "Callao", "Cusco", "Huancavelica", "Huánuco", "Ica",
            "Junín", "La Libertad", "Lambayeque", "Lima", "Loreto",
            "Madre de Dios", "Moquegua", "Pasco", "Piura", "Puno", "San Martín",
            "Tacna", "Tumbes", "Ucayali",
        ),
    },
    "BO": {
        "code": "BO", "name": "Bolivia", "currency": "BOB", "phone_prefix": "+591",
        "region_type": "department", "region_label": "Departamento",
        "coordinates": {"lat": -16.5000, "lng": -68.1500, "zoom": 6},
        "main_city": "La Paz",
        "states": _states(
            "Beni", "Chuquisaca", "Cochabamba", "La Paz", "Oruro", "Pando",
            "Potosí", "Santa Cruz", "Tarija",
        ),
    },
    "CL": {
        "code": "CL", "name": "Chile", "currency": "CLP", "phone_prefix": "+56",
        "region_type": "region", "region_label": "Región",
        "coordinates": {"lat": -33.4489, "lng": -70.6693, "zoom": 4},
        "main_city": "Santiago",
        "states": _states(
            "Arica y Parinacota", "Tarapacá", "Antofagasta", "Atacama",
            "Coquimbo", "Valparaíso", "Metropolitana", "O'Higgins", "Maule",
            "Ñuble", "Biobío", "La Araucanía", "Los Ríos", "Los Lagos", "Aysén",
            "Magallanes",
        ),
    },
    "AR": {
        "code": "AR", "name": "Argentina", "currency": "ARS", "phone_prefix": "+54",
        "region_type": "province", "region_label": "Provincia",
        "coordinates": {"lat": -34.6037, "lng": -58.3816, "zoom": 4},
        "main_city": "Buenos Aires",
        "states": _states(
            "Buenos Aires", "CABA", "Catamarca", "Chaco", "Chubut", "Córdoba",
            "Corrientes", "Entre Ríos", "Formosa", "Jujuy", "La Pampa",
            "La Rioja", "Mendoza", "Misiones", "Neuquén", "Río Negro", "Salta",
            "San Juan", "San Luis", "Santa Cruz", "Santa Fe",
            "Santiago del Estero", "Tierra del Fuego", "Tucumán",
        ),
    },
    "UY": {
        "code": "UY", "name": "Uruguay", "currency": "UYU", "phone_prefix": "+598",
        "region_type": "department", "region_label": "Departamento",
        "coordinates": {"lat": -34.9011, "lng": -56.1645, "zoom": 7},
        "main_city": "Montevideo",
        "states": _states(
            "Artigas", "Canelones", "Cerro Largo", "Colonia", "Durazno",
            "Flores", "Florida", "Lavalleja", "Maldonado", "Montevideo",
            "Paysandú", "Río Negro", "Rivera", "Rocha", "Salto", "San José",
            "Soriano", "Tacuarembó", "Treinta y Tres",
        ),
    },
    "PY": {
        "code": "PY", "name": "Paraguay", "currency": "PYG", "phone_prefix": "+595",
        "region_type": "department", "region_label": "Departamento",
        "coordinates": {"lat": -25.2637, "lng": -57.5759, "zoom": 6},
        "main_city": "Asunción",
        "states": _states(
            "Asunción", "Concepción", "San Pedro", "Cordillera", "Guairá",
            "Caaguazú", "Caazapá", "Itapúa", "Misiones", "Paraguarí",
            "Alto Paraná", "Central", "Ñeembucú", "Amambay", "Canindeyú",
            "Presidente Hayes", "Boquerón", "Alto Paraguay",
        ),
    },
    "BR": {
        "code": "BR", "name": "Brasil", "currency": "BRL", "phone_prefix": "+55",
        "region_type": "state", "region_label": "Estado",
        "coordinates": {"lat": -15.8267, "lng": -47.9218, "zoom": 4},
        "main_city": "Brasilia",
        "states": _states(
            "Acre", "Alagoas", "Amapá", "Amazonas", "Bahia", "Ceará",
            "Distrito Federal", "Espírito Santo", "Goiás", "Maranhão",
            "Mato Grosso", "Mato Grosso do Sul", "Minas Gerais", "Pará",
            "Paraíba", "Paraná", "Pernambuco", "Piauí", "Rio de Janeiro",
            "Rio Grande do Norte", "Rio Grande do Sul", "Rondônia", "Roraima",
            "Santa Catarina", "São Paulo", "Sergipe", "Tocantins",
        ),
    },
    # 加勒比
    "DO": {
        "code": "DO", "name": "Rep. Dominicana", "currency": "DOP", "phone_prefix": "+1",
        "region_type": "province", "region_label": "Provincia",
        "coordinates": {"lat": 18.4861, "lng": -69.9312, "zoom": 8},
        "main_city": "Santo Domingo",
        "states": _states(
            "Santo Domingo", "Santiago", "La Altagracia", "La Romana",
            "Puerto Plata", "San Cristóbal", "San Pedro de Macorís", "La Vega",
            "Duarte",
        ),
    },
    "CU": {
        "code": "CU", "name": "Cuba", "currency": "CUP", "phone_prefix": "+53",
        "region_type": "province", "region_label": "Provincia",
        "coordinates": {"lat": 23.1136, "lng": -82.3666, "zoom": 6},
        "main_city": "La Habana",
        "states": _states(
            "La Habana", "Santiago de Cuba", "Holguín", "Granma", "Villa Clara",
            "Matanzas", "Camagüey", "Pinar del Río",
        ),
    },
    # 其他地区
    "US": {
        "code": "US", "name": "United States", "currency": "USD", "phone_prefix": "+1",
        "region_type": "state", "region_label": "Estado",
        "coordinates": {"lat": 38.9072, "lng": -77.0369, "zoom": 4},
        "main_city": "Washington D.C.",
        "states": _states(
            "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
            "Connecticut", "Delaware", "Florida", "Georgia", "Hawaii", "Idaho",
            "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana",
            "Maine", "Maryland", "Massachusetts", "Michigan", "Minnesota",
            "Mississippi", "Missouri", "Montana", "Nebraska", "Nevada",
            "New Hampshire", "New Jersey", "New Mexico", "New York",
            "North Carolina", "North Dakota", "Ohio", "Oklahoma", "Oregon",
            "Pennsylvania", "Rhode Island", "South Carolina", "South Dakota",
            "Tennessee", "Texas", "Utah", "Vermont", "Virginia", "Washington",
            "West Virginia", "Wisconsin", "Wyoming",
        ),
    },
    "CA": {
        "code": "CA", "name": "Canada", "currency": "CAD", "phone_prefix": "+1",
        "region_type": "province", "region_label": "Provincia",
        "coordinates": {"lat": 45.4215, "lng": -75.6972, "zoom": 4},
        "main_city": "Ottawa",
        "states": _states(
            "Alberta", "British Columbia", "Manitoba", "New Brunswick",
            "Newfoundland and Labrador", "Nova Scotia", "Ontario",
            "Prince Edward Island", "Quebec", "Saskatchewan",
        ),
    },
    "ES": {
        "code": "ES", "name": "España", "currency": "EUR", "phone_prefix": "+34",
        "region_type": "province", "region_label": "Provincia",
        "coordinates": {"lat": 40.4168, "lng": -3.7038, "zoom": 6},
        "main_city": "Madrid",
        "states": _states(
            "Álava", "Albacete", "Alicante", "Almería", "Asturias", "Ávila",
            "Badajoz", "Barcelona", "Burgos", "Cáceres", "Cádiz", "Cantabria",
            "Castellón", "Ciudad Real", "Córdoba", "Cuenca", "Gerona", "Granada",
            "Guadalajara", "Guipúzcoa", "Huelva", "Huesca", "Islas Baleares",
            "Jaén", "La Coruña", "La Rioja", "Las Palmas", "León", "Lérida",
            "Lugo", "Madrid", "Málaga", "Murcia", "Navarra", "Orense", "Palencia",
            "Pontevedra", "Salamanca", "Santa Cruz de Tenerife", "Segovia",
            "Sevilla", "Soria", "Tarragona", "Teruel", "Toledo", "Valencia",
            "Valladolid", "Vizcaya", "Zamora", "Zaragoza",
        ),
    },
}

# 洪都拉斯各省首府坐标（用于地理编码失败时的兜底）
HN_DEPARTMENT_CENTROIDS: Dict[str, Dict[str, float]] = {
    "Atlántida": {"lat": 15.7597, "lng": -86.7822},
    "Choluteca": {"lat": 13.3007, "lng": -87.1908},
    "Colón": {"lat": 15.9167, "lng": -85.9500},
    "Comayagua": {"lat": 14.4517, "lng": -87.6375},
    "Copán": {"lat": 14.7667, "lng": -88.7833},
    "Cortés": {"lat": 15.5042, "lng": -88.0250},
    "El Paraíso": {"lat": 13.9440, "lng": -86.8510},
    "Francisco Morazán": {"lat": 14.0818, "lng": -87.2068},
    "Gracias a Dios": {"lat": 15.2667, "lng": -83.7667},
    "Intibucá": {"lat": 14.3000, "lng": -88.1833},
    "Islas de la Bahía": {"lat": 16.3167, "lng": -86.5333},
    "La Paz": {"lat": 14.3200, "lng": -87.6800},
    "Lempira": {"lat": 14.5833, "lng": -88.5833},
    "Ocotepeque": {"lat": 14.4333, "lng": -89.1833},
    "Olancho": {"lat": 14.6667, "lng": -86.2167},
    "Santa Bárbara": {"lat": 14.9167, "lng": -88.2333},
    "Valle": {"lat": 13.5333, "lng": -87.4833},
    "Yoro": {"lat": 15.1333, "lng": -87.1333},
}


def _fold(value: Optional[str]) -> str:
    """去除重音并转小写，用于宽松匹配。"""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return stripped.strip().lower()


_NAME_TO_CODE: Dict[str, str] = {
    _fold(cfg["name"]): code for code, cfg in COUNTRIES.items()
}
# 历史数据里出现过的别名
_NAME_TO_CODE.update({
    "mexico": "MX",
    "republica dominicana": "DO",
    "estados unidos": "US",
    "usa": "US",
    "spain": "ES",
    "brazil": "BR",
    "peru": "PE",
    "panama": "PA",
})


def get_country_config(code: Optional[str]) -> Dict[str, Any]:
    """获取国家配置，未知代码返回默认国家配置。"""
    return COUNTRIES.get((code or "").upper()) or COUNTRIES[DEFAULT_COUNTRY]


def is_supported_country(code: Optional[str]) -> bool:
    return bool(code) and code.upper() in COUNTRIES


def normalize_country_code(value: Optional[str],
                           default: str = DEFAULT_COUNTRY) -> str:
    """将国家名称或 ISO2 代码统一为 ISO2 代码。

    兼容旧数据中存储完整国家名（如 "Honduras"、"México"）的情况，
    无法识别时返回 default。
    """
    if not value:
        return default
    raw = str(value).strip()
    if raw.upper() in COUNTRIES:
        return raw.upper()
    return _NAME_TO_CODE.get(_fold(raw), default)


def match_department(department: Optional[str]) -> Optional[str]:
    """在洪都拉斯省份表中查找匹配的省份名。

    先精确匹配（忽略重音和大小写），再按前缀、子串双向匹配。
    同前缀的省份名可能误匹配，按表中顺序取第一个。
    """
    needle = _fold(department)
    if not needle:
        return None
    folded = {_fold(name): name for name in HN_DEPARTMENT_CENTROIDS}
    if needle in folded:
        return folded[needle]
    for key, name in folded.items():
        if key.startswith(needle) or needle.startswith(key):
            return name
    for key, name in folded.items():
        if key in needle or needle in key:
            return name
    return None


def get_location_fallback(city: Optional[str], department: Optional[str],
                          country: Optional[str] = None) -> Dict[str, float]:
    """静态坐标兜底，永远返回 {"lat", "lng"}。

    洪都拉斯优先按省份中心点，其余国家使用国家中心点，
    未知国家使用默认国家中心点。city 目前仅保留在签名中，不参与匹配。
    """
    code = normalize_country_code(country)
    if code == "HN":
        name = match_department(department)
        if name:
            return dict(HN_DEPARTMENT_CENTROIDS[name])
    coords = get_country_config(code)["coordinates"]
    return {"lat": coords["lat"], "lng": coords["lng"]}
