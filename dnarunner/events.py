from dataclasses import dataclass
from typing import Any, Tuple


def _unwrap(value):
    # legacy decoders wrap positional event args as {'type': ..., 'value': ...}
    if isinstance(value, dict) and set(value) >= {'type', 'value'}:
        return value['value']
    return value


@dataclass(frozen=True)
class ChainEvent:
    """An event emitted by a finalized extrinsic, e.g. `Assets.Issued(who, hash, total_supply)`.
    Payload fields are positional, in the order the pallet declares them."""
    module: str
    name: str
    args: Tuple[Any, ...] = ()

    def __getitem__(self, index):
        return self.args[index]

    def __str__(self):
        return f"{self.module}.{self.name}{self.args}"

    def matches(self, module, name):
        return self.module == module and self.name == name

    @classmethod
    def from_record(cls, record):
        """Build from a substrate-interface event record (anything with a `.value` dict)."""
        value = record.value
        event = value.get('event', value)
        attributes = value.get('attributes', event.get('attributes'))
        if attributes is None:
            args = ()
        elif isinstance(attributes, dict):
            args = tuple(_unwrap(v) for v in attributes.values())
        elif isinstance(attributes, (list, tuple)):
            args = tuple(_unwrap(v) for v in attributes)
        else:
            args = (attributes,)
        return cls(module=value.get('module_id', event.get('module_id')),
                   name=value.get('event_id', event.get('event_id')),
                   args=args)


def find_event(events, module, name):
    """Return the first event `module.name` from `events`, or None."""
    return next((e for e in events if e.matches(module, name)), None)


def missing_events(events, expected):
    """Return the (module, name) pairs from `expected` that have no match in `events`."""
    return [(module, name) for module, name in expected if find_event(events, module, name) is None]
