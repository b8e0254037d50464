"""
Validation à deux niveaux (lot puis offres) produisant une ValidationErrorMap plate.

- Clés du lot: nom du champ nu ("email", "postCount"...).
- Clés d'offre: "posts[{index}].{champ}".
- Toutes les offres sont validées, sans court-circuit: l'appelant reçoit
  l'ensemble des erreurs en un seul aller-retour.
- Une map vide est le seul signal pour continuer vers le paiement.
"""
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, EmailStr, Field, HttpUrl, ValidationError, field_validator

from jobpost import config
from jobpost.constants import EXPIRY_OPTIONS, MAX_TAG_LENGTH, MAX_TAGS_PER_POST, Currency, JobType
from jobpost.posts.models import BatchSubmission, PostEntry, ValidationErrorMap

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"

REQUIRED = "Champ requis"

_MESSAGES = {
    "missing": REQUIRED,
    "string_too_short": REQUIRED,
    "string_too_long": "Texte trop long",
    "string_pattern_mismatch": "Format invalide",
    "url_parsing": "URL invalide",
    "url_scheme": "URL invalide (http ou https)",
    "url_type": "URL invalide",
    "enum": "Valeur non supportée",
    "int_parsing": "Doit être un nombre entier",
    "int_type": "Doit être un nombre entier",
    "greater_than_equal": "Doit être un nombre positif",
}

# Messages propres à un champ (remplacent le message générique hors "requis")
_FIELD_MESSAGES = {
    "email": "Adresse email invalide",
    "applyEmail": "Adresse email invalide",
    "color": "Couleur hexadécimale attendue (ex: #1f2937)",
    "currency": "Devise non supportée",
    "type": "Type de contrat non supporté",
}


class BatchSchema(BaseModel):
    email: EmailStr
    website: Optional[HttpUrl] = None
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=10000)
    logo: HttpUrl
    color: str = Field(pattern=HEX_COLOR)
    expires_after: int = Field(alias="expiresAfter")
    currency: Currency
    post_count: int = Field(alias="postCount")

    @field_validator("expires_after")
    def expiry_is_offered(cls, v: int) -> int:
        if v not in EXPIRY_OPTIONS:
            choices = ", ".join(str(d) for d in EXPIRY_OPTIONS)
            raise ValueError(f"Durée non proposée (choix: {choices} jours)")
        return v

    @field_validator("post_count")
    def post_count_in_bounds(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Le lot doit contenir au moins une offre")
        if v > config.MAX_POSTS_PER_BATCH:
            raise ValueError(f"{config.MAX_POSTS_PER_BATCH} offres maximum par lot")
        return v


class PostSchema(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    job_type: JobType = Field(alias="type")
    location: str = Field(min_length=1, max_length=100)
    salary_start: Optional[int] = Field(default=None, alias="salaryStart", ge=0)
    salary_end: Optional[int] = Field(default=None, alias="salaryEnd", ge=0)
    apply_link: Optional[HttpUrl] = Field(default=None, alias="applyLink")
    apply_email: Optional[EmailStr] = Field(default=None, alias="applyEmail")
    description: str = Field(min_length=1, max_length=10000)
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    def tags_are_bounded(cls, v: List[str]) -> List[str]:
        if len(v) > MAX_TAGS_PER_POST:
            raise ValueError(f"{MAX_TAGS_PER_POST} tags maximum")
        if any(len(tag) > MAX_TAG_LENGTH for tag in v):
            raise ValueError(f"Un tag ne peut dépasser {MAX_TAG_LENGTH} caractères")
        return v


# module jobpost.posts.validation
def _message_for(field: str, error: Dict[str, Any]) -> str:
    kind = error.get("type", "")
    if kind in ("missing", "string_too_short"):
        return REQUIRED
    if field in _FIELD_MESSAGES:
        return _FIELD_MESSAGES[field]
    if kind == "value_error":
        cause = (error.get("ctx") or {}).get("error")
        return str(cause) if cause else str(error.get("msg", "")).removeprefix("Value error, ")
    return _MESSAGES.get(kind, "Valeur invalide")

def get_validation_errors(schema: Type[BaseModel], data: Dict[str, Any]) -> ValidationErrorMap:
    """
    Valide `data` contre `schema` et retourne {champ: message}.
    - Les valeurs None sont retirées pour que pydantic signale "missing".
    - Un seul message par champ (le premier rencontré).
    """
    payload = {k: v for k, v in (data or {}).items() if v is not None}
    try:
        schema.model_validate(payload)
        return {}
    except ValidationError as exc:
        errors: ValidationErrorMap = {}
        for error in exc.errors():
            loc = error.get("loc") or ()
            field = str(loc[0]) if loc else "other"
            errors.setdefault(field, _message_for(field, error))
        return errors

def _count_matches(batch: BatchSubmission, entries: Sequence[PostEntry]) -> bool:
    if len(entries) != batch.post_count:
        return False
    if [e.index for e in entries] != list(range(batch.post_count)):
        return False
    return batch.posts_found is None or batch.posts_found == batch.post_count

def validate_batch(batch: BatchSubmission, entries: Sequence[PostEntry]) -> ValidationErrorMap:
    errors = get_validation_errors(BatchSchema, batch.model_dump(by_alias=True))
    if "postCount" not in errors and not _count_matches(batch, entries):
        found = batch.posts_found if batch.posts_found is not None else len(entries)
        errors["postCount"] = (
            f"Le nombre d'offres déclaré ({batch.post_count}) ne correspond pas "
            f"aux offres envoyées ({found})"
        )
    return errors

def validate_entry(entry: PostEntry) -> ValidationErrorMap:
    errors = get_validation_errors(PostSchema, entry.model_dump(by_alias=True, exclude={"index"}))
    if (
        entry.salary_start is not None
        and entry.salary_end is not None
        and entry.salary_end < entry.salary_start
    ):
        errors.setdefault("salaryEnd", "Le salaire maximum doit être supérieur ou égal au minimum")
    if not entry.apply_link and not entry.apply_email:
        errors.setdefault("applyEmail", "Indiquez un lien ou un email de candidature")
    return errors

def validate(batch: BatchSubmission, entries: Sequence[PostEntry]) -> ValidationErrorMap:
    """
    Fonction pure: n'altère ni le lot ni les offres.
    Fusionne les erreurs d'offres dans la map du lot avec l'espace de noms posts[i].
    """
    errors = validate_batch(batch, entries)
    for entry in entries:
        for field, message in validate_entry(entry).items():
            errors[f"posts[{entry.index}].{field}"] = message
    return errors
