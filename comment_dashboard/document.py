"""Index-based document tree.

The live design document is modelled as a lookup table of node records keyed
by node id. Each record holds its parent id and ordered child ids, so there are
no object back-references to keep consistent. The tree also carries the bits of
host state navigation touches: the current page, the selection, and which
nodes the viewport was last focused on.

Trees are built programmatically (``add_page`` / ``add_node``) or from the
JSON document of ``GET /v1/files/{key}`` via ``DocumentTree.from_file_json``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from comment_dashboard.utils.errors import DocumentLookupError

DOCUMENT_TYPE = "DOCUMENT"
PAGE_TYPE = "PAGE"

# The REST API calls pages "CANVAS"; the plugin API calls them "PAGE"
_TYPE_ALIASES = {"CANVAS": PAGE_TYPE}


@dataclass
class DocumentNode:
    """One addressable element of the document.

    Attributes:
        id: Node identifier (e.g. "12:34")
        name: Layer name
        type: Type tag (FRAME, TEXT, PAGE, ...)
        parent_id: Identifier of the parent, None for the document root
        children: Ordered child identifiers
    """
    id: str
    name: str
    type: str
    parent_id: Optional[str] = None
    children: List[str] = field(default_factory=list)


class DocumentTree:
    """Mutable document tree addressed by node id.

    Example:
        >>> doc = DocumentTree()
        >>> doc.add_page("1:0", "Designs")
        >>> doc.add_node("1:2", "Header", "FRAME", parent_id="1:0")
        >>> doc.find_ancestor_page(doc.get_node_by_id("1:2")).name
        'Designs'
    """

    def __init__(self, root_id: str = "0:0", root_name: str = "Document"):
        self._root_id = root_id
        self._nodes: Dict[str, DocumentNode] = {
            root_id: DocumentNode(id=root_id, name=root_name, type=DOCUMENT_TYPE),
        }
        self._current_page_id: Optional[str] = None
        self.selection: List[str] = []
        self.viewport_focus: List[str] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    @property
    def root(self) -> DocumentNode:
        return self._nodes[self._root_id]

    # Building and mutating

    def add_node(
        self,
        node_id: str,
        name: str,
        node_type: str,
        parent_id: Optional[str] = None,
    ) -> DocumentNode:
        """Insert a node under ``parent_id`` (the document root by default).

        Raises:
            DocumentLookupError: If the id already exists or the parent is unknown
        """
        if node_id in self._nodes:
            raise DocumentLookupError(f"Duplicate node id: {node_id}")
        parent_id = parent_id or self._root_id
        parent = self._nodes.get(parent_id)
        if parent is None:
            raise DocumentLookupError(f"Unknown parent node: {parent_id}")

        node = DocumentNode(id=node_id, name=name, type=node_type, parent_id=parent_id)
        self._nodes[node_id] = node
        parent.children.append(node_id)

        if node_type == PAGE_TYPE and self._current_page_id is None and parent_id == self._root_id:
            self._current_page_id = node_id
        return node

    def add_page(self, page_id: str, name: str) -> DocumentNode:
        """Append a top-level page."""
        return self.add_node(page_id, name, PAGE_TYPE, parent_id=self._root_id)

    def remove_node(self, node_id: str) -> None:
        """Delete a node and its whole subtree, as if removed in the editor."""
        node = self._nodes.get(node_id)
        if node is None or node_id == self._root_id:
            return

        parent = self._nodes.get(node.parent_id)
        if parent is not None and node_id in parent.children:
            parent.children.remove(node_id)

        stack = [node_id]
        while stack:
            current = self._nodes.pop(stack.pop(), None)
            if current is None:
                continue
            stack.extend(current.children)
            if current.id == self._current_page_id:
                self._current_page_id = None
            if current.id in self.selection:
                self.selection.remove(current.id)

        if self._current_page_id is None and self.pages:
            self._current_page_id = self.pages[0].id

    def rename_node(self, node_id: str, name: str) -> None:
        node = self.get_node_by_id(node_id)
        if node is None:
            raise DocumentLookupError(f"Unknown node: {node_id}")
        node.name = name

    # Queries

    def get_node_by_id(self, node_id: str) -> Optional[DocumentNode]:
        """Look up a node, returning None for ids that are not in the document.

        Raises:
            DocumentLookupError: If node_id is not a non-empty string
        """
        if not isinstance(node_id, str) or not node_id:
            raise DocumentLookupError(f"Invalid node id: {node_id!r}")
        return self._nodes.get(node_id)

    def get_parent(self, node: DocumentNode) -> Optional[DocumentNode]:
        if node.parent_id is None:
            return None
        return self._nodes.get(node.parent_id)

    @property
    def pages(self) -> List[DocumentNode]:
        """Top-level pages in document order."""
        return [
            self._nodes[child_id]
            for child_id in self.root.children
            if child_id in self._nodes and self._nodes[child_id].type == PAGE_TYPE
        ]

    def find_ancestor_page(self, node: DocumentNode) -> Optional[DocumentNode]:
        """Walk up the parent chain to the containing page.

        Stops at a node that is its own parent or revisits an ancestor.
        """
        if node.type == PAGE_TYPE:
            return node

        seen = {node.id}
        current = self.get_parent(node)
        while current is not None:
            if current.type == PAGE_TYPE:
                return current
            if current.parent_id is None or current.parent_id == current.id or current.parent_id in seen:
                break
            seen.add(current.id)
            current = self.get_parent(current)
        return None

    def is_node_in_page(self, node: DocumentNode, page: DocumentNode) -> bool:
        """Whether ``node`` lies in the subtree rooted at ``page``."""
        seen = set()
        current = node
        while current is not None:
            if current.id == page.id:
                return True
            if current.parent_id is None or current.parent_id == current.id or current.id in seen:
                return False
            seen.add(current.id)
            current = self.get_parent(current)
        return False

    def find_page_containing(self, node: DocumentNode) -> Optional[DocumentNode]:
        """Linear search over the top-level pages for one containing ``node``."""
        for page in self.pages:
            if self.is_node_in_page(node, page):
                return page
        return None

    def find_page_by_name(self, name: Optional[str]) -> Optional[DocumentNode]:
        """First page whose trimmed, lower-cased name equals ``name``'s."""
        if not name:
            return None
        wanted = name.lower().strip()
        for page in self.pages:
            if page.name.lower().strip() == wanted:
                return page
        return None

    # Host state

    @property
    def current_page(self) -> Optional[DocumentNode]:
        if self._current_page_id is None:
            return None
        return self._nodes.get(self._current_page_id)

    @current_page.setter
    def current_page(self, page: DocumentNode) -> None:
        if page is None or page.type != PAGE_TYPE or page.id not in self._nodes:
            raise DocumentLookupError("Current page must be a page of this document")
        if self._current_page_id != page.id:
            self.selection = []
        self._current_page_id = page.id

    def focus_viewport(self, nodes: Iterable[DocumentNode]) -> None:
        """Scroll and zoom the viewport so ``nodes`` are visible."""
        ids = [n.id for n in nodes]
        missing = [node_id for node_id in ids if node_id not in self._nodes]
        if missing:
            raise DocumentLookupError(f"Cannot focus nodes that are not in the document: {missing}")
        self.viewport_focus = ids

    def select_and_focus(self, nodes: List[DocumentNode]) -> None:
        """Select ``nodes`` on the current page and focus the viewport on them."""
        self.selection = [n.id for n in nodes]
        self.focus_viewport(nodes)

    @classmethod
    def from_file_json(cls, data: Dict[str, Any]) -> "DocumentTree":
        """Build a tree from a file JSON payload (``{"document": {...}}``).

        A bare document node dict is accepted too. CANVAS nodes become pages.

        Raises:
            DocumentLookupError: If the payload has no document node
        """
        document = data.get("document", data) if isinstance(data, dict) else None
        if not isinstance(document, dict) or "id" not in document:
            raise DocumentLookupError("File JSON has no document node")

        tree = cls(root_id=str(document["id"]), root_name=document.get("name") or "Document")

        stack = [(child, tree._root_id) for child in reversed(document.get("children") or [])]
        while stack:
            raw, parent_id = stack.pop()
            if not isinstance(raw, dict) or "id" not in raw:
                continue
            raw_type = str(raw.get("type") or "")
            node = tree.add_node(
                str(raw["id"]),
                raw.get("name") or "",
                _TYPE_ALIASES.get(raw_type, raw_type),
                parent_id=parent_id,
            )
            stack.extend((child, node.id) for child in reversed(raw.get("children") or []))

        return tree
