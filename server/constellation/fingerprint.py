from constellation.constants import FANOUT, MAX_DELTA_FRAMES


def hashes_from_constellation(stars, fanout=FANOUT, max_delta_frames=MAX_DELTA_FRAMES):
    """
    Pairs stars of a constellation map into combinatorial hashes.

    Stars are sorted by (time, frequency) so the result does not depend on
    the order flush() returned them in. Each anchor is paired with up to
    `fanout` later stars no more than `max_delta_frames` frames ahead;
    stars in the anchor's own frame are skipped.

    Returns:
      A list of tuples (hash_str, anchor_time)
      where hash_str has the form: "anchor_freq:target_freq:delta_frames"
    """
    ordered = sorted(stars, key=lambda s: (s.time, s.frequency))

    fingerprints = []
    N = len(ordered)
    for i in range(N):
        anchor = ordered[i]
        count = 0
        for j in range(i + 1, N):
            target = ordered[j]
            dt = target.time - anchor.time
            if dt > max_delta_frames or count >= fanout:
                break
            if dt == 0:
                continue
            fingerprints.append((f"{anchor.frequency}:{target.frequency}:{dt}", anchor.time))
            count += 1
    return fingerprints
