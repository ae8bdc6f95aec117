"""Conversion between store records (plain dicts) and domain aggregates."""


def hydrate(cls, record: dict, fields: tuple[str, ...]):
    """Build an aggregate of `cls` from a store record, keeping known fields only."""
    values = {name: record[name] for name in fields if record.get(name) is not None}
    return cls(id=record["id"], **values)


def snapshot(aggregate, fields: tuple[str, ...]) -> dict:
    """Read the listed fields of an aggregate back into a record dict."""
    record = {"id": str(aggregate.id)}
    record.update({name: getattr(aggregate, name) for name in fields})
    return record
