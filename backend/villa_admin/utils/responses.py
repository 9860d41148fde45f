from fastapi import Response

from villa_admin.utils.csv_export import export_filename


def serialize(schema, obj):
    if isinstance(obj, list):
        return [serialize(schema, item) for item in obj]
    return schema.model_validate(obj).model_dump(mode="json")


def csv_response(content: str, prefix: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(prefix)}"'},
    )
