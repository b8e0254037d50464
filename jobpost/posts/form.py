"""
Passage du formulaire plat (clé -> texte) aux enregistrements typés.
Pur: pas de réseau, pas de Stripe.
"""
import re
from typing import List, Mapping, Optional

from jobpost import config
from jobpost.posts.models import BatchSubmission, PostEntry

# posts[3].title -> (3, "title")
POST_FIELD_RE = re.compile(r"^posts\[(\d+)\]\.([A-Za-z]+)$")

POST_FIELDS = (
    "title",
    "type",
    "location",
    "salaryStart",
    "salaryEnd",
    "applyLink",
    "applyEmail",
    "description",
    "tags",
)

# module jobpost.posts.form
def _clean(value: Optional[str]) -> Optional[str]:
    """Supprime les espaces; une chaîne vide devient None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None

def parse_int(raw: Optional[str]) -> Optional[int]:
    """Entier ou None si absent/non numérique."""
    value = _clean(raw)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None

def parse_post_count(raw: Optional[str]) -> int:
    """
    Nombre d'offres déclaré par le formulaire.
    - Absent, non numérique ou négatif => 0 (jamais d'erreur à ce stade).
    - Le validateur signale ensuite un lot sans offre.
    """
    count = parse_int(raw)
    return count if count and count > 0 else 0

def split_tags(raw: Optional[str]) -> List[str]:
    """
    Découpe "a, b ,c" en ["a", "b", "c"].
    - None ou "" => []
    - Ignore les tags vides (virgules finales) et les doublons, ordre conservé.
    """
    tags: List[str] = []
    for tag in (raw or "").split(","):
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags

def entry_indices(fields: Mapping[str, str]) -> List[int]:
    """Index distincts des offres présentes (clés posts[i].champ), triés."""
    indices = set()
    for key in fields:
        match = POST_FIELD_RE.match(key)
        if match and match.group(2) in POST_FIELDS:
            indices.add(int(match.group(1)))
    return sorted(indices)

def build_batch(fields: Mapping[str, str]) -> BatchSubmission:
    currency = _clean(fields.get("currency"))
    return BatchSubmission(
        email=_clean(fields.get("email")),
        website=_clean(fields.get("website")),
        name=_clean(fields.get("name")),
        description=_clean(fields.get("description")),
        logo=_clean(fields.get("logo")),
        color=_clean(fields.get("color")),
        expiresAfter=parse_int(fields.get("expiresAfter")),
        currency=currency.upper() if currency else None,
        postCount=parse_post_count(fields.get("postCount")),
        postsFound=len(entry_indices(fields)),
    )

def build_entry(fields: Mapping[str, str], index: int) -> PostEntry:
    def get(name: str) -> Optional[str]:
        return fields.get(f"posts[{index}].{name}")

    return PostEntry(
        index=index,
        title=_clean(get("title")),
        type=_clean(get("type")),
        location=_clean(get("location")),
        salaryStart=parse_int(get("salaryStart")),
        salaryEnd=parse_int(get("salaryEnd")),
        applyLink=_clean(get("applyLink")),
        applyEmail=_clean(get("applyEmail")),
        description=_clean(get("description")),
        tags=split_tags(get("tags")),
    )

def build_entries(fields: Mapping[str, str], post_count: int) -> List[PostEntry]:
    """
    Construit les offres 0..post_count-1.
    - Boucle bornée par le nombre déclaré et par MAX_POSTS_PER_BATCH.
    - Un index manquant donne une offre vide (le validateur la signale).
    - Les index au-delà du nombre déclaré sont détectés via postsFound.
    """
    bound = min(max(post_count, 0), config.MAX_POSTS_PER_BATCH)
    return [build_entry(fields, i) for i in range(bound)]
