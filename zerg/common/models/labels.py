from typing import Dict


class ResourceLabels:
    ZERG_DOMAIN: str = "zerg.io/"

    ZERG_COMPONENT_TYPE_LABEL = ZERG_DOMAIN + "component-type"


class Labels(ResourceLabels):
    KUBERNETES_DOMAIN = "app.kubernetes.io/"

    KUBERNETES_NAME_LABEL = KUBERNETES_DOMAIN + "name"

    KUBERNETES_PART_OF_LABEL = KUBERNETES_DOMAIN + "part-of"

    APPLICATION_NAME = "zerg"

    KUBERNETES_MANAGED_BY_LABEL = KUBERNETES_DOMAIN + "managed-by"

    _labels: Dict[str, str]

    def __init__(self, labels: Dict[str, str] = None) -> None:
        self._labels = labels if labels else dict()

    def update(self, labels: Dict[str, str]) -> "Labels":
        self._labels.update(labels.copy())
        return self

    def as_dict(self) -> Dict[str, str]:
        """Return labels are dictionary."""
        return self._labels.copy()

    def include(self, label: str, value: str) -> "Labels":
        self.update({label: value})
        return self

    def include_kubernetes_name(self, name: str) -> "Labels":
        return self.include(self.KUBERNETES_NAME_LABEL, self.valid_label_value(name))

    def include_kubernetes_part_of(self) -> "Labels":
        return self.include(self.KUBERNETES_PART_OF_LABEL, self.APPLICATION_NAME)

    def include_kubernetes_managed_by(self, operator_name: str) -> "Labels":
        return self.include(self.KUBERNETES_MANAGED_BY_LABEL, operator_name)

    def include_zerg_component_type(self, type: str) -> "Labels":
        return self.include(self.ZERG_COMPONENT_TYPE_LABEL, type)

    def valid_label_value(self, value: str):
        """Modifies a value to make it a valid Label value:
        * (([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?
        * 63 characters max
        """
        if not value:
            return ""
        value = value[:63]
        return value.rstrip(".-_")

    def __str__(self):
        return f"Labels<{self._labels}>"

    @classmethod
    def generate_default_labels(
        cls,
        resource_name: str,
        component_type: str,
        managed_by: str,
    ) -> "Labels":
        labels = Labels()
        return (
            labels.include_kubernetes_name(resource_name)
            .include_kubernetes_part_of()
            .include_kubernetes_managed_by(managed_by)
            .include_zerg_component_type(component_type)
        )
