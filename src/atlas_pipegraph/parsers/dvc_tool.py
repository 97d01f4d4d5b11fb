"""
Colaborador externo do builder DVC.

O builder DVC não sabe como a ferramenta é localizada nem invocada: ele
depende apenas do protocolo `DvcTool`, que, dado um diretório de trabalho,
entrega:
    - o texto do fluxograma (`dvc dag --mermaid`)
    - os metadados de stages (`dvc.lock`: `{stages: {nome: {outs, deps}}}`)
    - os parâmetros do projeto (`params.yaml`), quando existirem

`DvcCliTool` é a implementação padrão. A resolução do comando segue a ordem:
    1. executável em virtualenv local (`.venv`, `venv`, `env`)
    2. `uv run dvc`
    3. `pipx run dvc`
    4. `dvc` global

O comando resolvido é armazenado em cache por diretório de trabalho, na
própria instância (sem estado global). Indisponibilidade da ferramenta é
sinalizada com `ToolUnavailableError`, inclusive quando um comando excede seu
timeout; nesse caso o processo é encerrado.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import yaml

from atlas_pipegraph.core.exceptions import ToolUnavailableError


LOCK_FILE = "dvc.lock"
PARAMS_FILE = "params.yaml"
VENV_DIRS = (".venv", "venv", "env")
PROBE_TIMEOUT = 10.0
DAG_TIMEOUT = 60.0


@dataclass(frozen=True)
class CommandInfo:
    command: str
    args: Tuple[str, ...] = ()

    def argv(self, *extra: str) -> List[str]:
        return [self.command, *self.args, *extra]


@runtime_checkable
class DvcTool(Protocol):
    async def flow_text(self, cwd: str) -> str:
        ...

    async def stage_metadata(self, cwd: str) -> Dict[str, Any]:
        ...

    async def params(self, cwd: str) -> Dict[str, Any]:
        ...


def _read_yaml_mapping(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is not None:
        return
    try:
        if os.name == "posix":
            # wrappers (uv/pipx) deixam o dvc como neto; mata o grupo inteiro
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        pass
    await proc.wait()


async def _run(
    argv: Sequence[str],
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Tuple[int, str, str]:
    """
    Executa um comando e devolve `(returncode, stdout, stderr)`.

    Falha ao iniciar o processo resulta em código 127. Estouro de `timeout`
    levanta `ToolUnavailableError`. Em timeout ou cancelamento da task, o
    processo (e seu grupo, em POSIX) é encerrado antes de propagar.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=os.name == "posix",
        )
    except OSError as exc:
        return 127, "", str(exc)

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        raise ToolUnavailableError(
            message="DVC command timed out",
            details={"argv": list(argv), "cwd": cwd, "timeout": timeout},
            hint="Check for a stale DVC lock or a slow first download via uv/pipx.",
        ) from None
    finally:
        await _terminate(proc)
    return proc.returncode or 0, stdout.decode("utf-8", "replace"), stderr.decode("utf-8", "replace")


class DvcCliTool:
    """Invoca a CLI do DVC; cache de comando por diretório de trabalho.

    `probe_timeout` limita cada `--version` da resolução; `dag_timeout`
    limita `dvc dag`, que pode aguardar o lock do repositório.
    """

    def __init__(self, probe_timeout: float = PROBE_TIMEOUT, dag_timeout: float = DAG_TIMEOUT) -> None:
        self.probe_timeout = probe_timeout
        self.dag_timeout = dag_timeout
        self._command_cache: Dict[str, CommandInfo] = {}

    def cached_command(self, cwd: str) -> Optional[CommandInfo]:
        return self._command_cache.get(cwd)

    @staticmethod
    def _venv_candidates(cwd: str) -> List[Path]:
        windows = sys.platform == "win32"
        bin_dir = "Scripts" if windows else "bin"
        exe = "dvc.exe" if windows else "dvc"
        return [Path(cwd) / d / bin_dir / exe for d in VENV_DIRS]

    async def _probe(self, info: CommandInfo, cwd: str) -> bool:
        try:
            code, _, _ = await _run(info.argv("--version"), cwd=cwd, timeout=self.probe_timeout)
        except ToolUnavailableError:
            return False
        return code == 0

    async def resolve_command(self, cwd: str) -> CommandInfo:
        cached = self._command_cache.get(cwd)
        if cached is not None:
            return cached

        candidates: List[CommandInfo] = [
            CommandInfo(str(p)) for p in self._venv_candidates(cwd) if p.exists()
        ]
        if shutil.which("uv"):
            candidates.append(CommandInfo("uv", ("run", "dvc")))
        if shutil.which("pipx"):
            candidates.append(CommandInfo("pipx", ("run", "dvc")))
        if shutil.which("dvc"):
            candidates.append(CommandInfo("dvc"))

        for info in candidates:
            if await self._probe(info, cwd):
                self._command_cache[cwd] = info
                return info

        raise ToolUnavailableError(
            message="DVC CLI not found",
            details={"cwd": cwd, "tried": [" ".join(c.argv()) for c in candidates]},
            hint="Install DVC in a local virtualenv, via uv/pipx, or globally.",
        )

    async def flow_text(self, cwd: str) -> str:
        info = await self.resolve_command(cwd)
        code, stdout, stderr = await _run(info.argv("dag", "--mermaid"), cwd=cwd, timeout=self.dag_timeout)
        if code != 0:
            raise ToolUnavailableError(
                message="dvc dag failed",
                details={"cwd": cwd, "returncode": code, "stderr": stderr.strip()},
            )
        return stdout

    async def stage_metadata(self, cwd: str) -> Dict[str, Any]:
        return _read_yaml_mapping(Path(cwd) / LOCK_FILE)

    async def params(self, cwd: str) -> Dict[str, Any]:
        return _read_yaml_mapping(Path(cwd) / PARAMS_FILE)


def working_directory(file_path: str) -> str:
    return os.path.dirname(os.path.abspath(file_path))
