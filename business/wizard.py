"""商家设置向导与资料编辑状态

向导状态是不可变的 SetupDraft，每个用户操作都是一个 Action，
由纯函数 reduce(draft, action) 计算出新的状态。
超出上限的操作不改变状态，只在 notice 中给出提示。

步骤：
    1 Información  商家名称
    2 Ubicación    城市和省份
    3 Categoría    主分类
    4 Galería      至少一张图片
    5 Revisión     确认提交
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Union

from business.schemas import BusinessProfileInput, BusinessProfileUpdate, SocialMedia, parse
from config.locations import DEFAULT_COUNTRY

MAX_ADDITIONAL_CATEGORIES = 2
MAX_SPECIALTIES = 6
MAX_IMAGES = 5
TOTAL_STEPS = 5

STEP_TITLES = {
    1: "Información",
    2: "Ubicación",
    3: "Categoría",
    4: "Galería",
    5: "Revisión",
}

NOTICE_MAX_ADDITIONAL = "Máximo 2 áreas adicionales permitidas."
NOTICE_MAX_SPECIALTIES = "Máximo 6 especialidades permitidas."
NOTICE_MAX_IMAGES = "Máximo 5 imágenes permitidas."
NOTICE_INCOMPLETE_STEP = "Completa los campos obligatorios para continuar."

EDITABLE_FIELDS = (
    "business_name", "description", "modality", "address", "phone",
    "department", "city", "email", "website",
    "instagram", "facebook", "tiktok",
)
SOCIAL_FIELDS = ("instagram", "facebook", "tiktok")


@dataclass(frozen=True)
class SetupDraft:
    step: int = 1
    business_name: str = ""
    description: str = ""
    category: str = ""
    subcategory: Optional[str] = None
    additional_categories: Tuple[str, ...] = ()
    specialties: Tuple[str, ...] = ()
    modality: str = "local"
    country: str = DEFAULT_COUNTRY
    department: str = ""
    city: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    instagram: str = ""
    facebook: str = ""
    tiktok: str = ""
    images: Tuple[str, ...] = ()
    notice: Optional[str] = None


def start_draft(user_email: Optional[str] = None,
                country: str = DEFAULT_COUNTRY) -> SetupDraft:
    """新建向导状态，联系邮箱默认取当前用户的邮箱"""
    return SetupDraft(email=user_email or "", country=country)


# ========== Actions ==========

@dataclass(frozen=True)
class SetField:
    name: str
    value: Any


@dataclass(frozen=True)
class SetCountry:
    code: str


@dataclass(frozen=True)
class SelectCategory:
    category_id: str


@dataclass(frozen=True)
class ToggleAdditionalCategory:
    category_id: str


@dataclass(frozen=True)
class SelectSubcategory:
    subcategory_id: str


@dataclass(frozen=True)
class ToggleSpecialty:
    label: str


@dataclass(frozen=True)
class AddImages:
    urls: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RemoveImage:
    url: str


@dataclass(frozen=True)
class NextStep:
    pass


@dataclass(frozen=True)
class PrevStep:
    pass


Action = Union[
    SetField, SetCountry, SelectCategory, ToggleAdditionalCategory,
    SelectSubcategory, ToggleSpecialty, AddImages, RemoveImage, NextStep, PrevStep,
]


def is_step_valid(draft: SetupDraft, step: int) -> bool:
    if step == 1:
        return bool(draft.business_name.strip())
    if step == 2:
        return bool(draft.city.strip()) and bool(draft.department.strip())
    if step == 3:
        return bool(draft.category)
    if step == 4:
        return len(draft.images) >= 1
    return True


def can_advance(draft: SetupDraft) -> bool:
    return is_step_valid(draft, draft.step)


def _toggle(items: Tuple[str, ...], value: str) -> Tuple[str, ...]:
    if value in items:
        return tuple(i for i in items if i != value)
    return items + (value,)


def reduce(draft: SetupDraft, action: Action) -> SetupDraft:
    """根据操作计算新的向导状态（不修改原状态）"""
    draft = replace(draft, notice=None)

    if isinstance(action, SetField):
        if action.name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown field: {action.name}")
        return replace(draft, **{action.name: action.value})

    if isinstance(action, SetCountry):
        return replace(draft, country=action.code, department="", city="")

    if isinstance(action, SelectCategory):
        return replace(draft, category=action.category_id, subcategory=None,
                       specialties=(), additional_categories=())

    if isinstance(action, ToggleAdditionalCategory):
        if action.category_id == draft.category:
            return draft
        selected = draft.additional_categories
        if (action.category_id not in selected
                and len(selected) >= MAX_ADDITIONAL_CATEGORIES):
            return replace(draft, notice=NOTICE_MAX_ADDITIONAL)
        return replace(draft, additional_categories=_toggle(selected, action.category_id))

    if isinstance(action, SelectSubcategory):
        return replace(draft, subcategory=action.subcategory_id, specialties=())

    if isinstance(action, ToggleSpecialty):
        selected = draft.specialties
        if action.label not in selected and len(selected) >= MAX_SPECIALTIES:
            return replace(draft, notice=NOTICE_MAX_SPECIALTIES)
        return replace(draft, specialties=_toggle(selected, action.label))

    if isinstance(action, AddImages):
        new_urls = tuple(u for u in action.urls if u not in draft.images)
        if len(draft.images) + len(new_urls) > MAX_IMAGES:
            return replace(draft, notice=NOTICE_MAX_IMAGES)
        return replace(draft, images=draft.images + new_urls)

    if isinstance(action, RemoveImage):
        return replace(draft, images=tuple(u for u in draft.images if u != action.url))

    if isinstance(action, NextStep):
        if not can_advance(draft):
            return replace(draft, notice=NOTICE_INCOMPLETE_STEP)
        return replace(draft, step=min(TOTAL_STEPS, draft.step + 1))

    if isinstance(action, PrevStep):
        return replace(draft, step=max(1, draft.step - 1))

    raise TypeError(f"Unsupported action: {action!r}")


def to_profile_input(draft: SetupDraft, user_id: str,
                     email: Optional[str] = None) -> BusinessProfileInput:
    """向导状态 → 创建商家资料的输入

    草稿中未填写邮箱时使用 email（当前用户的邮箱）。
    """
    social = {name: getattr(draft, name).strip() or None for name in SOCIAL_FIELDS}
    return BusinessProfileInput(
        business_name=draft.business_name.strip(),
        description=draft.description,
        category=draft.category,
        subcategory=draft.subcategory,
        subcategories=[draft.subcategory] if draft.subcategory else [],
        additional_categories=list(draft.additional_categories),
        specialties=list(draft.specialties),
        modality=draft.modality,
        country=draft.country,
        department=draft.department,
        city=draft.city,
        address=draft.address or None,
        phone=draft.phone or None,
        email=draft.email.strip() or email,
        website=draft.website.strip() or None,
        social_media=SocialMedia(**social) if any(social.values()) else None,
        images=list(draft.images),
    )


def submit(draft: SetupDraft, service, user_id: str,
           email: Optional[str] = None) -> Dict[str, Any]:
    """提交向导，调用 BusinessProfileService.create_profile"""
    return service.create_profile(user_id, to_profile_input(draft, user_id, email))


# ========== 资料编辑 ==========

def diff_for_update(original: Dict[str, Any],
                    edited: Dict[str, Any]) -> BusinessProfileUpdate:
    """只保留与原值不同、且允许更新的字段"""
    allowed = BusinessProfileUpdate.model_fields
    changed = {
        key: value for key, value in edited.items()
        if key in allowed and original.get(key) != value
    }
    return parse(BusinessProfileUpdate, changed)


class ProfileEditSession:
    """编辑页面的本地状态：记录原始资料和修改后的资料"""

    def __init__(self, original: Dict[str, Any]):
        self.original = dict(original)
        self.edited = dict(original)

    def set(self, name: str, value: Any) -> None:
        self.edited[name] = value

    def pending_changes(self) -> BusinessProfileUpdate:
        return diff_for_update(self.original, self.edited)

    def save(self, service, user_id: str) -> Optional[Dict[str, Any]]:
        """没有改动时不发起更新，返回 None"""
        update = self.pending_changes()
        if not update.changes():
            return None
        result = service.update_profile(user_id, update)
        self.original = dict(self.edited)
        return result
