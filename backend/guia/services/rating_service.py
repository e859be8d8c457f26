"""
Guia Backend — Rating Aggregator
==================================

What:  Mean comment stars per listing id for one kind.
How:   A single LEFT OUTER JOIN from the kind's table to comments through the
       kind's foreign key, grouped by listing id. Listings without comments
       get AVG over no rows, which SQL returns as NULL.

Query shape (restaurants):
    SELECT restaurants.id, avg(comments.stars)
    FROM restaurants LEFT OUTER JOIN comments
         ON comments.restaurant_id = restaurants.id
    WHERE restaurants.id IN (:ids)
    GROUP BY restaurants.id
"""

import uuid
from typing import Dict, Optional, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guia.kinds import ListingKind
from guia.models import Comment


def average_stars_query(kind: ListingKind, listing_ids: Sequence[uuid.UUID]) -> Select:
    model = kind.model
    fk = getattr(Comment, kind.comment_fk)
    return (
        select(model.id, func.avg(Comment.stars))
        .select_from(model)
        .outerjoin(Comment, fk == model.id)
        .where(model.id.in_(listing_ids))
        .group_by(model.id)
    )


async def average_stars(
    db: AsyncSession,
    kind: ListingKind,
    listing_ids: Sequence[uuid.UUID],
) -> Dict[uuid.UUID, Optional[float]]:
    """
    Map every id in `listing_ids` that exists to its mean stars, or None when
    the listing has no comments. Ids that do not exist are absent.
    """
    if not listing_ids:
        return {}
    result = await db.execute(average_stars_query(kind, listing_ids))
    return {
        listing_id: (float(avg) if avg is not None else None)
        for listing_id, avg in result.all()
    }
