# SPDX-License-Identifier: GPL-3.0-or-later
import os
from argparse import Action, ArgumentParser, Namespace
from typing import Any, Callable, List, Optional, Sequence, Union


class SplitAndExtend(Action):
    """Split a delimited option value and extend the destination list with its parts.

    ``--skip a,b --skip c`` results in ``["a", "b", "c"]``.
    """

    def __init__(self, *args, split_on: str = ",", **kwargs) -> None:
        """
        Instantiate the SplitAndExtend action.

        Args:
            split_on (str, optional)
                The delimiter used to split each received value. Defaults to ``,``.
        """
        self.split_on = split_on
        super(SplitAndExtend, self).__init__(*args, **kwargs)

    def __call__(
        self,
        parser: ArgumentParser,
        namespace: Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Extend the destination attribute with the split values."""
        if values is None:
            return

        if isinstance(values, str):
            values = [values]

        items: List[str] = list(getattr(namespace, self.dest, None) or [])
        for value in values:
            items.extend(value.split(self.split_on))
        setattr(namespace, self.dest, items)


def from_environ(key: str, delegate_converter: Callable[[str], Any] = lambda x: x):
    """
    Return an argparse ``type`` which falls back to an environment variable.

    When the option is empty (or absent, with an empty default), the value of the
    environment variable ``key`` is used instead.

    Args:
        key (str)
            The environment variable name.
        delegate_converter (callable, optional)
            Converter applied to the resulting value.
    Returns:
        The converter to be passed as ``type`` to ``add_argument``.
    """

    def new_converter(value: str) -> Any:
        if not value:
            value = os.environ.get(key) or ""
        return delegate_converter(value)

    return new_converter
