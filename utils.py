from typing import Iterable


def parse_range_str(range_str: str):
  s = set()
  for part in range_str.strip().split(","):
    part = part.strip()
    if not part:
      continue
    if "-" in part:
      start, end = map(int, part.split("-"))
      s.update(range(start, end + 1))
    else:
      s.add(int(part))
  return sorted(s)

def format_range_str(values: Iterable[int]) -> str:
  # inverse of parse_range_str: [1, 3, 4, 5] -> "1,3-5"
  parts = []
  run_start = run_end = None
  for v in sorted(set(values)):
    if run_end is not None and v == run_end + 1:
      run_end = v
      continue
    if run_start is not None:
      parts.append(str(run_start) if run_start == run_end else f"{run_start}-{run_end}")
    run_start = run_end = v
  if run_start is not None:
    parts.append(str(run_start) if run_start == run_end else f"{run_start}-{run_end}")
  return ",".join(parts)
