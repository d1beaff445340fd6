# Core module for testsieve

from testsieve.core.categories import (
    CategoryHierarchy,
    CategoryId,
)
from testsieve.core.category_filter import (
    CategoryFilter,
    FilterDecision,
)
from testsieve.core.description import (
    CategoryExtractor,
    Description,
)
from testsieve.core.models import (
    NodeKind,
    SelectedNode,
    SelectionResult,
)
from testsieve.core.selector import select
