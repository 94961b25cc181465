# page_dumper/output.py

"""
Запись результата дампа на диск.

Каждый ресурс пишется по своему пути внутри выходной папки, рядом можно
сохранить JSON-манифест (entry path, типы, размеры, карта identity → path).
"""
from __future__ import annotations

import json
import posixpath
import shutil
from pathlib import Path
from typing import Any, Dict, List, Union
from urllib.parse import unquote

from page_dumper.models import DumpResult


def local_file_path(out_dir: Path, resource_path: str) -> Path:
    """
    Переводит путь ресурса в путь файла внутри out_dir.

    Ссылки в документе остаются URL-кодированными, поэтому имя файла
    декодируется (``a%20b.png`` → ``a b.png``). Пути, выходящие за out_dir,
    отклоняются с ValueError.
    """
    decoded = unquote(resource_path).lstrip("/")
    normalized = posixpath.normpath(decoded)
    if normalized in ("", ".") or normalized.startswith("../") or normalized == "..":
        raise ValueError(f"Unsafe resource path: {resource_path!r}")
    return out_dir.joinpath(*normalized.split("/"))


def write_result(result: DumpResult, out_dir: Union[str, Path], *, clean: bool = False) -> List[Path]:
    """
    Сохраняет все ресурсы result в out_dir и возвращает список записанных файлов.

    :param clean: удалить out_dir перед записью
    """
    out = Path(out_dir)
    if clean and out.exists():
        shutil.rmtree(out)
    out.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for path, resource in result.items():
        target = local_file_path(out, path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(resource.payload)
        written.append(target)
    return written


def manifest_data(result: DumpResult) -> Dict[str, Any]:
    return {
        "entry": result.entry_path,
        "resources": {
            path: {"content_type": res.content_type, "size": res.size}
            for path, res in result.items()
        },
        "identities": dict(result.identities),
    }


def write_manifest(result: DumpResult, output_path: Union[str, Path]) -> Path:
    """
    Сохраняет JSON-манифест дампа по указанному пути.

    Пример:
    ```python
    from page_dumper.output import write_manifest
    write_manifest(result, 'out/manifest.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        json.dump(manifest_data(result), f, ensure_ascii=False, indent=2)
    return output


__all__ = ["write_result", "write_manifest", "manifest_data", "local_file_path"]
