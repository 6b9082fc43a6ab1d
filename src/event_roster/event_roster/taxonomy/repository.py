from __future__ import annotations

from typing import Collection, Dict, Mapping, Protocol, Sequence, Set


class TaxonomyRepository(Protocol):
    """Known values per taxonomy dimension (organization, category, team).

    Appends must be idempotent: values already present are ignored, so two
    imports racing on the same new value both succeed.
    """

    def list_known_values(self, dimension: str) -> Set[str]:
        raise NotImplementedError

    def append_new_values(self, dimension: str, values: Collection[str]) -> Sequence[str]:
        """Store `values` and return the ones that were actually new."""
        raise NotImplementedError

    def append_all_new_values(self, values_by_dimension: Mapping[str, Collection[str]]) -> Dict[str, Sequence[str]]:
        """Like append_new_values for several dimensions, all or nothing."""
        raise NotImplementedError
