"""业务分类（Taxonomy）配置表

三级静态分类树：分类组（category）→ 子分类（subcategory）→ 专长（specialty）。
标签按语言区分（es / en / pt），专长可以是纯字符串（仅西语）或语言字典。

该表是纯数据，供设置向导的三级选择器、搜索建议和接口层使用，
在导入时加载，不做继承层次。
"""
from typing import Any, Dict, List, Optional, Union

LOCALES = ("es", "en", "pt")
DEFAULT_LOCALE = "es"

Label = Dict[str, str]
Specialty = Union[str, Label]


TAXONOMY: Dict[str, Dict[str, Any]] = {
    # =========================================
    # 分类组 1：艺术与设计
    # =========================================
    "art_design": {
        "id": "art_design",
        "label": {"es": "Arte y Diseño", "en": "Art & Design", "pt": "Arte e Design"},
        "subcategories": [
            {
                "id": "photography",
                "label": {"es": "Fotografía", "en": "Photography", "pt": "Fotografia"},
                "specialties": [
                    {"es": "Retrato / Sesión personal", "en": "Portrait session", "pt": "Retrato / Sessão pessoal"},
                    {"es": "Fotografía de eventos", "en": "Event photography", "pt": "Fotografia de eventos"},
                    {"es": "Fotografía de producto (e-commerce)", "en": "Product photography", "pt": "Fotografia de produto"},
                    "Fotografía gastronómica",
                    "Fotografía inmobiliaria / arquitectura",
                    "Fotografía corporativa",
                    "Fotografía familiar / niños",
                    {"es": "Fotografía de bodas", "en": "Wedding photography", "pt": "Fotografia de casamento"},
                    "Fotografía con dron",
                ],
            },
            {
                "id": "videography",
                "label": {"es": "Videografía", "en": "Videography", "pt": "Videografia"},
                "specialties": [
                    "Video para eventos",
                    "Video corporativo",
                    "Video para redes (Reels/TikTok)",
                    "Video publicitario / comercial",
                    "Video inmobiliario",
                    "Videoclips musicales",
                    "Grabación con dron",
                    "Streaming / cobertura en vivo",
                ],
            },
            {
                "id": "editing",
                "label": {"es": "Edición (Foto/Video)", "en": "Editing", "pt": "Edição"},
                "specialties": [
                    "Edición de video (cortes + narrativa)",
                    "Colorización / color grading",
                    "Motion graphics / animación básica",
                    "Subtítulos (multi-idioma)",
                    "Edición para Reels/TikTok",
                    "Restauración de fotos",
                    "Retoque profesional (piel, limpieza)",
                    "Fotomontaje / composición",
                    "Optimización para redes (formatos)",
                ],
            },
            {
                "id": "graphic_design",
                "label": {"es": "Diseño Gráfico", "en": "Graphic Design", "pt": "Design Gráfico"},
                "specialties": [
                    {"es": "Logos / branding", "en": "Logos / branding", "pt": "Logos / branding"},
                    "Flyers / posters",
                    "Artes para redes sociales",
                    "Menús (diseño)",
                    "Presentaciones (pitch/empresa)",
                    "Identidad visual completa",
                    "Diseño para impresión (tarjetas, banners)",
                    "Packaging / etiquetas",
                    "Mockups de producto",
                ],
            },
            {
                "id": "music",
                "label": {"es": "Música", "en": "Music", "pt": "Música"},
                "specialties": [
                    "DJ (eventos)",
                    "Producción musical",
                    "Mezcla y masterización",
                    "Grabación de voz",
                    "Beats / instrumentales",
                    "Música para videos (jingles/intro)",
                    "Sonido en vivo (setup básico)",
                ],
            },
            {
                "id": "dance",
                "label": {"es": "Baile", "en": "Dance", "pt": "Dança"},
                "specialties": [
                    "Clases (individual/grupal)",
                    "Coreografías para eventos",
                    "Baile urbano",
                    "Salsa / bachata / merengue",
                    "Folklor / tradicional",
                    "K-Pop / moderno",
                    "Pole Dance",
                ],
            },
            {
                "id": "crafts",
                "label": {"es": "Manualidades", "en": "Crafts", "pt": "Artesanato"},
                "specialties": [
                    "Decoración artesanal",
                    "Personalizados (tazas, camisetas, regalos)",
                    "Arreglos/centros de mesa",
                    "Piñatas / decoraciones",
                    "Bisutería / accesorios",
                    "Detalles para eventos",
                ],
            },
            {
                "id": "self_defense",
                "label": {"es": "Defensa Personal", "en": "Self Defense", "pt": "Defesa Pessoal"},
                "specialties": [
                    "Artes marciales (general)",
                    "Karate",
                    "Taekwondo",
                    "Jiu-Jitsu / MMA",
                    "Boxeo",
                    "Kickboxing",
                    "Yoga",
                    "Defensa personal para mujeres",
                ],
            },
        ],
    },

    # =========================================
    # 分类组 2：综合服务
    # =========================================
    "general_services": {
        "id": "general_services",
        "label": {"es": "Servicios Generales", "en": "General Services", "pt": "Serviços Gerais"},
        "subcategories": [
            {
                "id": "cleaning",
                "label": {"es": "Limpieza", "en": "Cleaning", "pt": "Limpeza"},
                "specialties": [
                    {"es": "Limpieza de Hogar", "en": "Home cleaning", "pt": "Limpeza residencial"},
                    {"es": "Limpieza de Oficinas", "en": "Office cleaning", "pt": "Limpeza de escritórios"},
                    "Limpieza Post-obra",
                    "Lavado de Vehículos",
                ],
            },
            {
                "id": "handyman",
                "label": {"es": "Handyman / Montaje", "en": "Handyman", "pt": "Marido de Aluguel"},
                "specialties": ["Montaje de muebles", "Reparaciones menores", "Instalación de cuadros/TV", "Cortinas/Persianas"],
            },
            {
                "id": "plumbing",
                "label": {"es": "Plomería", "en": "Plumbing", "pt": "Encanamento"},
                "specialties": ["Fugas de agua", "Instalación de grifos", "Destape de drenajes", "Reparación de inodoros", "Bombas de agua"],
            },
            {
                "id": "electrical",
                "label": {"es": "Electricidad", "en": "Electrical", "pt": "Elétrica"},
                "specialties": ["Instalación de lámparas", "Reparación de cortocircuitos", "Cambio de tomacorrientes", "Cableado estructurado"],
            },
            {
                "id": "painting",
                "label": {"es": "Pintura", "en": "Painting", "pt": "Pintura"},
                "specialties": ["Pintura de interiores", "Pintura de exteriores", "Impermeabilización", "Resanado de paredes"],
            },
            {
                "id": "hvac",
                "label": {"es": "Clima / Aire Acond.", "en": "HVAC", "pt": "Ar Condicionado"},
                "specialties": ["Instalación A/C", "Mantenimiento preventivo", "Reparación y carga de gas", "Ventilación"],
            },
            {
                "id": "gardening",
                "label": {"es": "Jardinería", "en": "Gardening", "pt": "Jardinagem"},
                "specialties": ["Corte de césped", "Poda de árboles", "Diseño de jardines", "Fumigación"],
            },
            {
                "id": "locksmith",
                "label": {"es": "Cerrajería", "en": "Locksmith", "pt": "Chaveiro"},
                "specialties": ["Apertura de puertas", "Cambio de chapas", "Cerrajería automotriz", "Duplicados"],
            },
            {
                "id": "moving",
                "label": {"es": "Mudanzas", "en": "Moving", "pt": "Mudanças"},
                "specialties": ["Fletes locales", "Mudanza completa", "Embalaje y protección", "Transporte de carga"],
            },
            {
                "id": "shoe_repair",
                "label": {"es": "Zapatería", "en": "Shoe Repair", "pt": "Sapataria"},
                "specialties": ["Cambio de suela", "Reparación de tacón", "Costura / pegado", "Restauración (cuero/gamuza)", "Limpieza profunda"],
            },
            {
                "id": "auto_mechanic",
                "label": {"es": "Mecánica Automotriz", "en": "Auto Mechanic", "pt": "Mecânica Auto"},
                "specialties": ["Diagnóstico (scanner)", "Cambio de aceite / filtros", "Frenos", "Motor", "Aire acondicionado", "Emergencia / rescate"],
            },
            {
                "id": "moto_mechanic",
                "label": {"es": "Mecánica de Motos", "en": "Moto Mechanic", "pt": "Mecânica Moto"},
                "specialties": ["Mantenimiento general", "Frenos", "Cadena / sprockets", "Carburación / inyección", "Llantas"],
            },
        ],
    },

    # =========================================
    # 分类组 3：美容与健康
    # =========================================
    "beauty_wellness": {
        "id": "beauty_wellness",
        "label": {"es": "Belleza y Bienestar", "en": "Beauty & Wellness", "pt": "Beleza e Bem-estar"},
        "subcategories": [
            {
                "id": "hair",
                "label": {"es": "Cabello", "en": "Hair", "pt": "Cabelo"},
                "specialties": [
                    {"es": "Corte de Dama", "en": "Women's haircut", "pt": "Corte feminino"},
                    {"es": "Corte de Caballero (Barbería)", "en": "Men's haircut (Barber)", "pt": "Corte masculino (Barbearia)"},
                    {"es": "Colorimetría/Tintes", "en": "Hair coloring", "pt": "Coloração"},
                    {"es": "Tratamientos capilares", "en": "Hair treatments", "pt": "Tratamentos capilares"},
                    {"es": "Peinados", "en": "Hairstyling", "pt": "Penteados"},
                ],
            },
            {
                "id": "nails",
                "label": {"es": "Uñas", "en": "Nails", "pt": "Unhas"},
                "specialties": [
                    {"es": "Manicure", "en": "Manicure", "pt": "Manicure"},
                    {"es": "Pedicure", "en": "Pedicure", "pt": "Pedicure"},
                    {"es": "Uñas acrílicas", "en": "Acrylic nails", "pt": "Unhas acrílicas"},
                    {"es": "Gel/Semipermanente", "en": "Gel / semi-permanent", "pt": "Gel / semipermanente"},
                ],
            },
            {
                "id": "brows_lashes",
                "label": {"es": "Cejas y Pestañas", "en": "Brows & Lashes", "pt": "Sobrancelhas e Cílios"},
                "specialties": ["Lifting de pestañas", "Microblading", "Extensiones de pestañas", "Laminado de cejas"],
            },
            {
                "id": "hair_removal",
                "label": {"es": "Depilación", "en": "Hair Removal", "pt": "Depilação"},
                "specialties": ["Depilación con cera", "Depilación con hilo", "Depilación láser"],
            },
            {
                "id": "makeup",
                "label": {"es": "Maquillaje", "en": "Makeup", "pt": "Maquiagem"},
                "specialties": ["Maquillaje social", "Maquillaje de novia", "Maquillaje artístico"],
            },
            {
                "id": "skincare",
                "label": {"es": "Facial / Skincare", "en": "Skincare", "pt": "Cuidados com a Pele"},
                "specialties": ["Limpieza facial profunda", "Hidratación", "Tratamientos anti-edad"],
            },
            {
                "id": "massage",
                "label": {"es": "Masajes", "en": "Massage", "pt": "Massagem"},
                "specialties": [
                    {"es": "Masaje relajante", "en": "Relaxing massage", "pt": "Massagem relaxante"},
                    {"es": "Masaje descontracturante", "en": "Deep tissue massage", "pt": "Massagem descontraturante"},
                    "Masaje terapéutico",
                    "Drenaje linfático",
                ],
            },
        ],
    },
}


# ==========================================
# 辅助函数
# ==========================================

def normalize_specialty(specialty: Specialty) -> Label:
    """将专长统一为语言字典（纯字符串视为西语标签）。"""
    if isinstance(specialty, str):
        return {DEFAULT_LOCALE: specialty}
    return dict(specialty)


def label_for(label: Union[str, Label, None], locale: str = DEFAULT_LOCALE) -> str:
    """按语言取标签，缺失时回退到西语。"""
    if label is None:
        return ""
    if isinstance(label, str):
        return label
    return label.get(locale) or label.get(DEFAULT_LOCALE) or next(iter(label.values()), "")


def get_group(group_id: str) -> Optional[Dict[str, Any]]:
    """按 ID 获取分类组（顶层分类）。"""
    return TAXONOMY.get(group_id)


def get_all_categories() -> List[Dict[str, Any]]:
    """获取所有子分类（扁平化），附带所属分类组信息。"""
    return [
        {**sub, "group_label": group["label"]["es"], "group_id": group["id"]}
        for group in TAXONOMY.values()
        for sub in group["subcategories"]
    ]


def get_category_by_id(category_id: str) -> Optional[Dict[str, Any]]:
    """按 ID 查找子分类，找不到返回 None。"""
    for group in TAXONOMY.values():
        for sub in group["subcategories"]:
            if sub["id"] == category_id:
                return sub
    return None


def get_subcategories(group_id: str) -> List[Dict[str, Any]]:
    """获取分类组下的所有子分类。"""
    group = get_group(group_id)
    return list(group["subcategories"]) if group else []


def get_specialties(subcategory_id: str,
                    locale: str = DEFAULT_LOCALE) -> List[str]:
    """获取子分类下的专长标签列表（按语言）。"""
    sub = get_category_by_id(subcategory_id)
    if not sub:
        return []
    return [label_for(normalize_specialty(s), locale) for s in sub["specialties"]]


def is_known_category(category_id: str) -> bool:
    """分类 ID 是否存在（分类组或子分类均可）。"""
    return category_id in TAXONOMY or get_category_by_id(category_id) is not None


def all_labels() -> List[str]:
    """收集所有语言下的分类、子分类、专长标签（去重，用于搜索建议）。"""
    seen = []
    for group in TAXONOMY.values():
        candidates = list(group["label"].values())
        for sub in group["subcategories"]:
            candidates.extend(sub["label"].values())
            for specialty in sub["specialties"]:
                candidates.extend(normalize_specialty(specialty).values())
        for value in candidates:
            if value not in seen:
                seen.append(value)
    return seen
