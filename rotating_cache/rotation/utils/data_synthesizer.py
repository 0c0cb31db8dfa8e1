"""
Synthetic workload for comparing rotation policies.
Phases of hot working sets with some noise keys, re-insertion of recently dropped keys
and reads biased toward recently written keys.
"""
import numpy as np
import random
from collections import deque
from pathlib import Path
from typing import Iterator, Optional

# ----------------- CONFIGURATIONS ----------------
NUM_PHASES = 10                  # number of working phases in the workload
WORKING_SET_SIZE = 100           # hot keys per phase
N_COMMANDS_PER_PHASE = 200       # number of commands per phase

INSERT_WS_PROB = 0.6            # prob of inserting a key in hot keys of that phase
INSERT_NOISE = 0.02             # prob of inserting a key that is outside hot keys
REINSERT_PROB = 0.8             # prob of re-inserting a key that is recently dropped

READ_WS_PROB = 0.9              # prob of reading a key that is in the working set
READ_SET_PROB = 0.8             # prob of reading a key that have been set recently

EXPIRE_SET_PROB = 0.2           # prob of writing a key with a ttl
EXPIRE_TIME_MIN = 2
EXPIRE_TIME_MAX = 15            # ttl range in seconds

CAPACITY = 20                   # size of the simulated live set


class WorkloadSynthesizer:
    """
    Generates SET/GET trace lines. The live set is simulated with plain LRU,
    its victims feed the re-insertion pool.
    """
    def __init__(
        self,
        capacity: int = CAPACITY,
        num_phases: int = NUM_PHASES,
        working_set_size: int = WORKING_SET_SIZE,
        n_commands_per_phase: int = N_COMMANDS_PER_PHASE,
        expire_prob: float = 0.0,
        seed: int = 42,
    ) -> None:
        self._capacity = capacity
        self._num_phases = num_phases
        self._working_set_size = working_set_size
        self._n_commands_per_phase = n_commands_per_phase
        self._expire_prob = expire_prob

        # seed anything!
        self._rng = np.random.default_rng(seed)
        self._rnd = random.Random(seed)

        self._live = []                                     # keys, least recently used first
        self._recently_evicted = set()                      # pool for re-insertion
        self._recently_set = deque(maxlen=capacity)         # locality for reads

    def workload(self) -> Iterator[str]:
        # ----------------- CREATE DISJOINT WORKING SETS -----------------
        universe_ids = ["k" + str(i) for i in range(self._num_phases * self._working_set_size)]
        size = self._working_set_size
        phase_keys = [universe_ids[i * size: (i + 1) * size] for i in range(self._num_phases)]

        for phase in range(self._num_phases):
            hot_keys = list(phase_keys[phase])
            noise_keys = sorted(set(universe_ids) - set(hot_keys))

            for _ in range(self._n_commands_per_phase):
                write_prob = self._rng.random()
                # insert hot keys
                if write_prob < INSERT_WS_PROB:
                    yield from self._write(str(self._rng.choice(hot_keys)))

                # insert noise keys
                if write_prob < INSERT_NOISE and noise_keys:
                    yield from self._write(str(self._rng.choice(noise_keys)))

                # reinsert recently evicted keys
                if write_prob < REINSERT_PROB and self._recently_evicted:
                    yield from self._write(str(self._rng.choice(sorted(self._recently_evicted))))

                # read a key (90% in working set, 10% noise)
                read_prob = self._rng.random()
                recently_set_keys = list(self._recently_set)
                if read_prob < READ_SET_PROB and recently_set_keys:
                    key = str(self._rng.choice(recently_set_keys))
                elif read_prob < READ_WS_PROB:
                    key = str(self._rng.choice(hot_keys))
                else:
                    key = str(self._rng.choice(noise_keys or hot_keys))
                self._touch(key)
                yield f"GET {key}"

    def _ensure_room(self, key: str) -> None:
        """
        Evict from the simulated live set until there is room for key
        """
        if key in self._live:
            return
        while len(self._live) >= self._capacity:
            victim = self._live.pop(0)
            self._recently_evicted.add(victim)

    def _write(self, key: str) -> Iterator[str]:
        self._ensure_room(key)
        self._touch(key, insert=True)
        self._recently_evicted.discard(key)
        self._recently_set.append(key)

        value = f"v{key[1:]}"
        if self._expire_prob and self._rnd.random() < self._expire_prob:
            yield f"SET {key} {value} {self._rnd.randint(EXPIRE_TIME_MIN, EXPIRE_TIME_MAX)}"
        else:
            yield f"SET {key} {value}"

    def _touch(self, key: str, insert: bool = False) -> None:
        if key in self._live:
            self._live.remove(key)
        elif not insert:
            return
        self._live.append(key)  # most recently used position


def write_workload(path: str, synthesizer: Optional[WorkloadSynthesizer] = None) -> int:
    """
    Write a trace to `path`, one command per line. Return the number of commands.
    """
    synthesizer = synthesizer or WorkloadSynthesizer()
    n = 0
    with Path(path).expanduser().open("w", encoding="utf-8") as f:
        for command in synthesizer.workload():
            f.write(command + "\n")
            n += 1
    return n


if __name__ == "__main__":
    # write a sample workload to a file
    write_workload("workload.txt")
