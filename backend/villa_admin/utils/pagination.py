import math


def paginate(query, page: int = 1, per_page: int = 20):
    page = max(page, 1)
    per_page = max(min(per_page, 200), 1)

    total = query.count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": items,
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(total / per_page) if total else 0,
    }
