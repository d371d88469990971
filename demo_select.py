from carton_api.models import PackItem
from carton_api.packing import print_selection_summary
from carton_api.plotter3d import visualize_cartons_with_buttons
from carton_api.selector import CartonSelector

if __name__ == "__main__":
    # Default catalog: SMALL / MEDIUM / LARGE / EXTRA_LARGE boxes (inches, pounds)
    selector = CartonSelector()

    # Define a LIST of items to pack
    items = [PackItem(f"MUG-{i}", 6, 4, 2, weight=0.5) for i in range(3)]
    items.append(PackItem("VASE", 10, 6, 6, weight=2.0, fragile=True))
    items += [PackItem(f"BOOK-{i}", 11, 8.5, 1.5, weight=1.8) for i in range(12)]

    carton = selector.select_optimal_carton(items)
    if carton:
        cartons, unpacked = [carton], []
    else:
        print("No single carton fits; splitting...")
        result = selector.split_into_multiple_cartons(items)
        cartons, unpacked = list(result.cartons), list(result.unpacked)

    print("=" * 50)
    print(f"Total cartons used: {len(cartons)}")
    print(f"Estimated packaging cost: {sum(c.carton_type.cost for c in cartons)}\n")
    print_selection_summary(cartons, unpacked)

    print("Alternatives for the first three mugs:")
    for s in selector.suggest_alternatives(items[:3]):
        print(f" - {s.carton_type.label}: {s.score.total:.1f} ({s.recommendation})")

    visualize_cartons_with_buttons(cartons, unpacked)
