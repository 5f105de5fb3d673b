# compare_equatorial.py
import argparse, math, random, sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import ephem

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from astro_engine import sun
from astro_engine.models import Location

def pyephem_equatorial(when, lat, lon):
    obs = ephem.Observer()
    obs.lat = math.radians(lat)
    obs.lon = math.radians(lon)
    obs.pressure = 0
    obs.date = when.replace(tzinfo=None)
    obs.epoch = obs.date  # apparent place of date, like the converted values
    body = ephem.Sun(obs)
    return float(body.ra) * 12 / math.pi, math.degrees(body.dec)

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--start", default="2024-01-01")   # YYYY-MM-DD
    ap.add_argument("--days", type=int, default=366)
    ap.add_argument("--n", type=int, default=200)
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--ra-tol", type=float, default=0.01, help="Right ascension tolerance (hours)")
    ap.add_argument("--dec-tol", type=float, default=0.05, help="Declination tolerance (degrees)")
    ap.add_argument("--verbose", action="store_true", help="Print every sample")
    args = ap.parse_args()

    rng = random.Random(args.seed)
    t0 = datetime.strptime(args.start, "%Y-%m-%d").replace(tzinfo=timezone.utc)

    worst_ra = worst_dec = 0.0
    mismatches = 0
    for i in range(args.n):
        when = t0 + timedelta(seconds=rng.uniform(0, args.days * 86400))
        when = when.replace(microsecond=0)
        lat = rng.uniform(-85.0, 85.0)
        lon = rng.uniform(-180.0, 180.0)

        sample = sun.position(Location(lat, lon), when)
        ra_ref, dec_ref = pyephem_equatorial(when, lat, lon)

        d_ra = abs(sample.right_ascension_h - ra_ref) % 24
        d_ra = min(d_ra, 24 - d_ra)
        d_dec = abs(sample.declination_deg - dec_ref)
        worst_ra = max(worst_ra, d_ra)
        worst_dec = max(worst_dec, d_dec)

        bad = d_ra > args.ra_tol or d_dec > args.dec_tol
        mismatches += bad
        if args.verbose or bad:
            print(f"[{i:4d}] {when:%Y-%m-%dT%H:%M:%SZ} lat={lat:8.3f} lon={lon:9.3f} "
                  f"alt={sample.altitude_deg:7.2f} RA {sample.right_ascension_h:.4f}h vs {ra_ref:.4f}h "
                  f"Dec {sample.declination_deg:.4f} vs {dec_ref:.4f}{'  <-- MISMATCH' if bad else ''}")

    print(f"\nSamples: {args.n}  mismatches: {mismatches}")
    print(f"Worst |dRA|:  {worst_ra * 3600:.2f} s")
    print(f"Worst |dDec|: {worst_dec * 3600:.2f} arcsec")
    sys.exit(1 if mismatches else 0)

if __name__ == "__main__":
    main()
