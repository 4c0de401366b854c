import enum
from dataclasses import dataclass


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


@dataclass
class SourceError(Exception):
    errmsg: str
    code: str
    error_char_idx: int

    label = "Error"

    def __str__(self) -> str:
        print_start_idx = max(0, self.error_char_idx - 10)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(self.code), self.error_char_idx + 10)
        print_ellipsis_post = print_end_idx < len(self.code)
        return "\n".join(
            [
                f"[{self.label}] {self.errmsg}",
                (
                    ("..." if print_ellipsis_pre else "")
                    + self.code[print_start_idx:print_end_idx].replace("\n", " ").replace("\t", " ")
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.error_char_idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )
